"""Stream resolution and token decoding pipeline."""

__version__ = "0.1.0"
