"""tripbook: travel planning and booking demo service."""

__version__ = "0.1.0"
