"""Data models."""

from .property import CityEntry, CityUrlIndex, CityUrls, PropertyRecord, PROPERTY_COLUMNS

__all__ = [
    "CityEntry",
    "CityUrlIndex",
    "CityUrls",
    "PropertyRecord",
    "PROPERTY_COLUMNS",
]
