"""
Interfaces package for the Property Details Service.

Abstract base interfaces that decouple the service layer from the concrete
cache and property provider.
"""

from .cache import CacheStrategy
from .property_provider import PropertyProvider

__all__ = [
    'CacheStrategy',
    'PropertyProvider',
]
