"""
app/mappers package marker.
"""

from app.mappers.json_path import InvalidPathError, JsonPathError, PathNotFoundError, evaluate, parse_path
from app.mappers.response_mapper import NormalizedUserRecord, ResponseMapper

__all__ = [
    "InvalidPathError",
    "JsonPathError",
    "NormalizedUserRecord",
    "PathNotFoundError",
    "ResponseMapper",
    "evaluate",
    "parse_path",
]
