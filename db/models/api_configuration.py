"""
db/models/api_configuration.py

Stored definition of one external user source: how to call it and how to
map its JSON response onto internal user fields.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

DEFAULT_RESPONSE_ROOT_PATH = "$"


class HttpMethod:
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    ALL = (GET, POST, PUT, DELETE)
    EXECUTABLE = (GET, POST)


class AuthType:
    NONE = "NONE"
    BEARER_TOKEN = "BEARER_TOKEN"
    API_KEY = "API_KEY"
    BASIC_AUTH = "BASIC_AUTH"

    ALL = (NONE, BEARER_TOKEN, API_KEY, BASIC_AUTH)


class ApiConfiguration(Base, TimestampMixin):
    """
    One external integration source, keyed by its unique source_name.

    The configuration owns an ordered list of field mappings; evaluation
    order equals declaration order (the ``position`` column). Deleting a
    configuration deletes its mappings.
    """

    __tablename__ = "api_configurations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    source_name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Unique external source key, e.g. calendly",
    )
    endpoint_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    http_method: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=HttpMethod.GET,
        comment="GET, POST, PUT, DELETE (only GET/POST are executable)",
    )
    auth_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AuthType.NONE,
        comment="NONE, BEARER_TOKEN, API_KEY, BASIC_AUTH",
    )
    auth_credentials: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    request_headers: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="JSON object of extra request headers",
    )
    response_root_path: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Path selecting the result root; document root when empty",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    field_mappings: Mapped[list["FieldMapping"]] = relationship(
        "FieldMapping",
        back_populates="api_configuration",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FieldMapping.position",
    )

    __table_args__ = (
        UniqueConstraint("source_name", name="uq_api_configurations_source_name"),
        Index("ix_api_configurations_is_active", "is_active"),
    )

    def add_field_mapping(self, mapping: "FieldMapping") -> "FieldMapping":
        """
        Append a mapping, assigning it the next declaration position.
        """

        mapping.position = len(self.field_mappings)
        self.field_mappings.append(mapping)
        return mapping

    def resolved_root_path(self) -> str:
        root = (self.response_root_path or "").strip()
        return root or DEFAULT_RESPONSE_ROOT_PATH

    def __repr__(self) -> str:
        return f"<ApiConfiguration source_name={self.source_name!r} method={self.http_method!r}>"


class FieldMapping(Base):
    """
    Extraction rule for one internal field.

    ``json_path`` is evaluated relative to a single result item. When
    extraction fails a required mapping aborts the fetch; an optional one
    falls back to ``default_value`` or is left out of the record.
    """

    __tablename__ = "field_mappings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    api_configuration_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("api_configurations.id", ondelete="CASCADE"),
        nullable=False,
    )
    internal_field_name: Mapped[str] = mapped_column(String(120), nullable=False)
    json_path: Mapped[str] = mapped_column(String(500), nullable=False)
    default_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    api_configuration: Mapped[ApiConfiguration] = relationship(
        "ApiConfiguration",
        back_populates="field_mappings",
    )

    __table_args__ = (
        Index("ix_field_mappings_api_configuration_id", "api_configuration_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<FieldMapping field={self.internal_field_name!r} path={self.json_path!r} "
            f"required={self.required}>"
        )
