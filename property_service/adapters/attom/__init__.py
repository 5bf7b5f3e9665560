"""ATTOM property API adapter."""

from property_service.adapters.attom.client import AttomClient, split_address
from property_service.adapters.attom.normalizer import AttomPropertyRecord, normalize_property

__all__ = ["AttomClient", "AttomPropertyRecord", "normalize_property", "split_address"]
