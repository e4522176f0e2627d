"""Vehicle store API: catalog browsing, token auth and order placement."""

__version__ = "1.0.0"
