"""Cricket Monitor performance collector."""

__version__ = "1.0.0"
