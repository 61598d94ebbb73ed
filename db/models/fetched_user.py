"""
db/models/fetched_user.py

Normalized user row fetched from an external source.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utc_now

# Normalized record key -> FetchedUser attribute.
MUTABLE_USER_FIELDS: dict[str, str] = {
    "email": "email",
    "name": "name",
    "firstName": "first_name",
    "lastName": "last_name",
    "timezone": "timezone",
    "avatarUrl": "avatar_url",
}

EXTERNAL_ID_FIELD = "externalId"


class FetchedUser(Base):
    """
    One user as last seen in an external source.

    (source_name, external_id) is the natural key. fetched_at records the
    first sighting and is never changed afterwards; last_seen_at moves on
    every successful reconciliation.
    """

    __tablename__ = "fetched_users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    source_name: Mapped[str] = mapped_column(String(120), nullable=False)
    external_id: Mapped[str] = mapped_column(String(500), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(120), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    raw_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Full normalized record from the latest fetch",
    )
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        UniqueConstraint(
            "source_name",
            "external_id",
            name="uq_fetched_users_source_external_id",
        ),
        Index("ix_fetched_users_source_name", "source_name"),
    )

    def __repr__(self) -> str:
        return f"<FetchedUser source_name={self.source_name!r} external_id={self.external_id!r}>"
