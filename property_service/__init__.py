"""Property Details Service: address lookups against the ATTOM property API."""

__version__ = "0.1.0"
