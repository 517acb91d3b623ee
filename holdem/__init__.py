"""Single-table Texas Hold'em engine."""
__version__ = "0.1.0"
