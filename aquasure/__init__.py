"""AquaSure: heavy-metal water quality monitoring backend."""

__version__ = "0.1.0"
