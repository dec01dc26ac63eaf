"""Kitchen OS shop backend: cart pricing, checkout and payments."""

__version__ = "1.0.0"
