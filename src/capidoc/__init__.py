"""capidoc: versioned API documentation data for C header trees."""

__version__ = "0.1.0"
