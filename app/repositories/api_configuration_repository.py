"""
app/repositories/api_configuration_repository.py

Persistence helpers for integration configurations.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.repositories.base import ApiConfigurationStore
from db.models.api_configuration import ApiConfiguration


class ApiConfigurationRepository(ApiConfigurationStore):
    """
    SQLAlchemy-backed configuration store.

    Field mappings are eagerly loaded so callers can use a configuration
    after the session is gone. The caller owns commit/rollback.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        stmt = (
            select(ApiConfiguration)
            .options(selectinload(ApiConfiguration.field_mappings))
            .where(ApiConfiguration.source_name == source_name.strip())
        )
        return self._session.execute(stmt).scalars().one_or_none()

    def find_active_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        stmt = (
            select(ApiConfiguration)
            .options(selectinload(ApiConfiguration.field_mappings))
            .where(ApiConfiguration.source_name == source_name.strip())
            .where(ApiConfiguration.is_active.is_(True))
        )
        return self._session.execute(stmt).scalars().one_or_none()

    def list_all(self) -> list[ApiConfiguration]:
        stmt = (
            select(ApiConfiguration)
            .options(selectinload(ApiConfiguration.field_mappings))
            .order_by(ApiConfiguration.source_name)
        )
        return list(self._session.execute(stmt).scalars().all())

    def save(self, configuration: ApiConfiguration) -> ApiConfiguration:
        """
        Add or merge the configuration and flush so store-managed columns are set.
        """

        self._session.add(configuration)
        self._session.flush()
        return configuration
