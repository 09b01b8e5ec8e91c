"""pokerclient — terminal client for networked Texas Hold'em tables."""

__version__ = "0.1.0"
