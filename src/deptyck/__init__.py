"""deptyck - type checker for a small explicitly-typed functional language."""

__version__ = "0.1.0"
