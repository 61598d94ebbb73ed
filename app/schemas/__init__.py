"""
app/schemas package marker.
"""

from app.schemas.user_integration import (
    ApiConfigurationResponse,
    ErrorResponse,
    FetchedUserResponse,
    FetchUsersRequest,
    FetchUsersResponse,
    FieldMappingResponse,
    PageResponse,
)

__all__ = [
    "ApiConfigurationResponse",
    "ErrorResponse",
    "FetchedUserResponse",
    "FetchUsersRequest",
    "FetchUsersResponse",
    "FieldMappingResponse",
    "PageResponse",
]
