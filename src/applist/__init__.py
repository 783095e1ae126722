"""GreenLuma AppList manager with a cached Steam catalog lookup."""

__version__ = "0.1.0"
