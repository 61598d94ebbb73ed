"""
app/services/api_config_service.py

Lookup and maintenance of integration configurations.
"""

from __future__ import annotations

import logging

from app.exceptions import ApiConfigurationNotActiveError, ApiConfigurationNotFoundError
from app.repositories.base import ApiConfigurationStore
from db.models.api_configuration import ApiConfiguration

logger = logging.getLogger(__name__)


class ApiConfigService:
    def __init__(self, store: ApiConfigurationStore) -> None:
        self._store = store

    def find_active_configuration(self, source_name: str) -> ApiConfiguration:
        """
        Resolve the active configuration for a source.

        Raises ApiConfigurationNotActiveError when the source exists but is
        switched off, ApiConfigurationNotFoundError when it does not exist.
        """

        logger.debug("Finding active configuration source=%s", source_name)
        configuration = self._store.find_active_by_source_name(source_name)
        if configuration is not None:
            return configuration

        if self._store.find_by_source_name(source_name) is not None:
            raise ApiConfigurationNotActiveError(source_name)
        raise ApiConfigurationNotFoundError(source_name)

    def get_all_configurations(self) -> list[ApiConfiguration]:
        logger.debug("Retrieving all API configurations")
        return self._store.list_all()

    def get_configuration(self, source_name: str) -> ApiConfiguration:
        logger.debug("Retrieving configuration source=%s", source_name)
        configuration = self._store.find_by_source_name(source_name)
        if configuration is None:
            raise ApiConfigurationNotFoundError(source_name)
        return configuration

    def save_configuration(self, configuration: ApiConfiguration) -> ApiConfiguration:
        logger.info("Saving API configuration source=%s", configuration.source_name)
        return self._store.save(configuration)
