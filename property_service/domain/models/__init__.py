"""
Domain models package for the Property Details Service.

Contains the normalized property contract returned to callers.
"""

from property_service.domain.models.property import NormalizedProperty

__all__ = ["NormalizedProperty"]
