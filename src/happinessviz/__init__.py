"""Interactive parallel-coordinates explorer for World Happiness Report data."""

__version__ = "0.1.0"
