"""Dataset output module."""

from .files import (
    find_latest_city_index,
    find_latest_properties_file,
    load_city_index,
    read_city_index,
    write_city_index,
    write_properties,
)

__all__ = [
    "find_latest_city_index",
    "find_latest_properties_file",
    "load_city_index",
    "read_city_index",
    "write_city_index",
    "write_properties",
]
