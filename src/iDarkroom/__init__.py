"""iDarkroom: non-destructive adjustment and mask geometry engine."""

__version__ = "0.4.0"
