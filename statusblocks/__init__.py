"""Status bar feed for dwm: runs block commands and sets their joined output as the X root window name."""

__version__ = "0.1.0"
__all__ = ["__version__"]