"""HTTP surface of the workforce identity service."""
