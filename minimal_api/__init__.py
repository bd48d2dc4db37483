"""Product catalog API with username/password accounts and bearer tokens."""

__version__ = "0.1.0"
