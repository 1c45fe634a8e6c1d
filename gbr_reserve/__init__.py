"""Tax reserve engine for German partnerships (GbR)."""

__version__ = "0.1.0"
