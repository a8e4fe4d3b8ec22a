"""Consent-gated telemetry engine: metric refresh, consent tracking, dispatch."""

__version__ = "0.1.0"
