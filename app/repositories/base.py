"""
app/repositories/base.py

Store interfaces consumed by the fetch pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from app.domain.user_integration import Page
from db.models.api_configuration import ApiConfiguration
from db.models.fetched_user import FetchedUser


class ApiConfigurationStore(ABC):
    """
    Storage abstraction for integration configurations.

    source_name is unique; lookups return at most one configuration.
    """

    @abstractmethod
    def find_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        """
        Return the configuration for a source regardless of its active flag.
        """

    @abstractmethod
    def find_active_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        """
        Return the configuration for a source only when it is active.
        """

    @abstractmethod
    def list_all(self) -> list[ApiConfiguration]:
        """
        Return every configuration.
        """

    @abstractmethod
    def save(self, configuration: ApiConfiguration) -> ApiConfiguration:
        """
        Insert or update a configuration together with its field mappings.
        """


class UserStore(ABC):
    """
    Storage abstraction for fetched users keyed by (source_name, external_id).
    """

    @abstractmethod
    def find_by_key(self, source_name: str, external_id: str) -> FetchedUser | None:
        """
        Return the stored user for the natural key, if any.
        """

    @abstractmethod
    def upsert(
        self,
        *,
        source_name: str,
        external_id: str,
        changes: dict[str, str | None],
        raw_data: dict[str, Any],
    ) -> FetchedUser:
        """
        Atomically insert or update one user.

        Only attributes named in ``changes`` are written on update; other
        stored attributes keep their values. ``raw_data`` always replaces the
        stored payload.
        """

    @abstractmethod
    def save(self, user: FetchedUser) -> FetchedUser:
        """
        Persist a user instance as-is.
        """

    @abstractmethod
    def list_all(self, *, page: int, size: int) -> Page[FetchedUser]:
        """
        Return one page of all stored users.
        """

    @abstractmethod
    def list_by_source(self, source_name: str, *, page: int, size: int) -> Page[FetchedUser]:
        """
        Return one page of users from a single source.
        """
