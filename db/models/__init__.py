"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.api_configuration import ApiConfiguration, AuthType, FieldMapping, HttpMethod
from db.models.fetched_user import FetchedUser

__all__ = [
    "ApiConfiguration",
    "AuthType",
    "FetchedUser",
    "FieldMapping",
    "HttpMethod",
]
