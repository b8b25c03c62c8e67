"""Identity and access-control core for the workforce admin console."""

__version__ = "0.1.0"
