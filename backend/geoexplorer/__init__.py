"""GeoExplorer: street-level geography guessing game backend."""

__version__ = "1.0.0"
