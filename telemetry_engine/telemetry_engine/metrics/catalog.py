"""Well-known metric identifiers and the lifecycle dispatch lists."""

from __future__ import annotations

MODULES = "modules"
SYSTEM_CONTEXT = "system_context"
BLOCK_DESTROYED = "block_destroyed"
BLOCK_PLACED = "block_placed"
GAME_CONFIGURATION = "game_configuration"
GAMEPLAY = "gameplay"
MONSTER_KILLED = "monster_killed"

# Sent once when the game begins.
BOOTSTRAP_METRICS: tuple[str, ...] = (MODULES, SYSTEM_CONTEXT)

# Sent once at shutdown, never periodically.
SHUTDOWN_METRICS: tuple[str, ...] = (
    BLOCK_DESTROYED,
    BLOCK_PLACED,
    GAME_CONFIGURATION,
    GAMEPLAY,
    MONSTER_KILLED,
)
