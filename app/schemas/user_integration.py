"""
app/schemas/user_integration.py

Request/response schemas for user integration endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")


class FetchUsersRequest(BaseModel):
    source_name: str = Field(..., max_length=120, description="Configured source to fetch from")

    @field_validator("source_name")
    @classmethod
    def _require_non_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("source_name must not be blank")
        return stripped


class FetchUsersResponse(BaseModel):
    source_name: str
    users_fetched: int = Field(..., ge=0)
    message: str


class FieldMappingResponse(BaseModel):
    id: uuid.UUID | None = None
    internal_field_name: str
    json_path: str
    default_value: str | None = None
    required: bool

    model_config = {"from_attributes": True}


class ApiConfigurationResponse(BaseModel):
    """
    Configuration view; auth credentials are never exposed.
    """

    id: uuid.UUID | None = None
    source_name: str
    endpoint_url: str
    http_method: str
    auth_type: str
    request_headers: str | None = None
    response_root_path: str | None = None
    is_active: bool
    field_mappings: list[FieldMappingResponse] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class FetchedUserResponse(BaseModel):
    id: uuid.UUID | None = None
    source_name: str
    external_id: str
    email: str | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    timezone: str | None = None
    avatar_url: str | None = None
    fetched_at: datetime | None = None
    last_seen_at: datetime | None = None

    model_config = {"from_attributes": True}


class PageResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    page: int = Field(..., ge=0)
    size: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)


class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    path: str
    timestamp: datetime
    correlation_id: str
