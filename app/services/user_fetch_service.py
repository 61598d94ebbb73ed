"""
app/services/user_fetch_service.py

Orchestration service for fetching users from a configured external source.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import get_external_http_settings
from app.connectors.external_api_client import ExternalApiClient
from app.domain.user_integration import FetchUsersSummary, Page
from app.mappers.response_mapper import ResponseMapper
from app.repositories.api_configuration_repository import ApiConfigurationRepository
from app.repositories.base import UserStore
from app.repositories.fetched_user_repository import FetchedUserRepository
from app.services.api_config_service import ApiConfigService
from app.services.user_reconciler import UserReconciler
from db.models.fetched_user import FetchedUser
from db.session import get_db

logger = logging.getLogger(__name__)


class UserFetchService:
    """
    Coordinates configuration lookup, the external call, response mapping
    and reconciliation.

    Lookup, call and mapping failures abort the fetch and propagate to the
    caller. Reconciliation failures are per record and only lower the
    saved count.
    """

    def __init__(
        self,
        *,
        config_service: ApiConfigService,
        user_store: UserStore,
        api_client: ExternalApiClient,
        response_mapper: ResponseMapper | None = None,
        reconciler: UserReconciler | None = None,
    ) -> None:
        self._config_service = config_service
        self._user_store = user_store
        self._api_client = api_client
        self._response_mapper = response_mapper or ResponseMapper()
        self._reconciler = reconciler or UserReconciler(user_store)

    def fetch_users_from_source(self, source_name: str) -> FetchUsersSummary:
        logger.info("Starting user fetch source=%s", source_name)

        config = self._config_service.find_active_configuration(source_name)
        raw_body = self._api_client.call(config)
        records = self._response_mapper.map_response(raw_body, config)
        result = self._reconciler.reconcile(config.source_name, records)

        logger.info(
            "Completed user fetch source=%s fetched=%s saved=%s failed=%s",
            config.source_name,
            result.total,
            result.saved,
            result.failed,
        )
        return FetchUsersSummary(
            source_name=config.source_name,
            users_fetched=result.saved,
            message=f"Successfully fetched {result.saved} users from {config.source_name}",
        )

    def get_all_users(self, *, page: int, size: int) -> Page[FetchedUser]:
        logger.debug("Retrieving all fetched users page=%s size=%s", page, size)
        return self._user_store.list_all(page=page, size=size)

    def get_users_by_source(self, source_name: str, *, page: int, size: int) -> Page[FetchedUser]:
        logger.debug("Retrieving users source=%s page=%s size=%s", source_name, page, size)
        return self._user_store.list_by_source(source_name, page=page, size=size)


@lru_cache(maxsize=1)
def get_external_api_client() -> ExternalApiClient:
    """
    Build and cache the shared outbound client.
    """

    return ExternalApiClient(http_settings=get_external_http_settings())


def get_api_config_service(db: Session = Depends(get_db)) -> ApiConfigService:
    return ApiConfigService(ApiConfigurationRepository(db))


def get_user_fetch_service(
    db: Session = Depends(get_db),
    config_service: ApiConfigService = Depends(get_api_config_service),
    api_client: ExternalApiClient = Depends(get_external_api_client),
) -> UserFetchService:
    """
    Build a request-scoped fetch service bound to the request session.
    """

    return UserFetchService(
        config_service=config_service,
        user_store=FetchedUserRepository(db),
        api_client=api_client,
    )
