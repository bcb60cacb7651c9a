"""AI Secretary: Korean natural-language command interpreter."""

__version__ = "0.1.0"
