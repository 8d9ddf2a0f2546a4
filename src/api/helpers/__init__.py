"""API helper utilities."""
from api.helpers.parameters import parse_include, parse_where_assoc_type

__all__ = [
    "parse_include",
    "parse_where_assoc_type",
]
