"""
app/api/routers/user_integration.py

User integration HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import get_pagination_settings
from app.domain.user_integration import Page
from app.schemas.user_integration import (
    ApiConfigurationResponse,
    FetchedUserResponse,
    FetchUsersRequest,
    FetchUsersResponse,
    PageResponse,
)
from app.services.api_config_service import ApiConfigService
from app.services.user_fetch_service import (
    UserFetchService,
    get_api_config_service,
    get_user_fetch_service,
)
from db.models.fetched_user import FetchedUser
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/integrations", tags=["user-integrations"])


def _resolve_page_size(size: int | None) -> int:
    settings = get_pagination_settings()
    if size is None:
        return settings.default_page_size
    return min(size, settings.max_page_size)


def _to_page_response(page: Page[FetchedUser]) -> PageResponse[FetchedUserResponse]:
    return PageResponse[FetchedUserResponse](
        items=[FetchedUserResponse.model_validate(user) for user in page.items],
        page=page.page,
        size=page.size,
        total_items=page.total_items,
        total_pages=page.total_pages,
    )


@router.post("/fetch", response_model=FetchUsersResponse)
def fetch_users(
    body: FetchUsersRequest,
    db: Session = Depends(get_db),
    fetch_service: UserFetchService = Depends(get_user_fetch_service),
) -> FetchUsersResponse:
    """
    Fetch users from one configured source and upsert them.
    """

    logger.info("Received fetch request source=%s", body.source_name)
    try:
        summary = fetch_service.fetch_users_from_source(body.source_name)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return FetchUsersResponse(
        source_name=summary.source_name,
        users_fetched=summary.users_fetched,
        message=summary.message,
    )


@router.get("/users", response_model=PageResponse[FetchedUserResponse])
def get_all_users(
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    fetch_service: UserFetchService = Depends(get_user_fetch_service),
) -> PageResponse[FetchedUserResponse]:
    result = fetch_service.get_all_users(page=page, size=_resolve_page_size(size))
    return _to_page_response(result)


@router.get("/users/{source_name}", response_model=PageResponse[FetchedUserResponse])
def get_users_by_source(
    source_name: str,
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    fetch_service: UserFetchService = Depends(get_user_fetch_service),
) -> PageResponse[FetchedUserResponse]:
    result = fetch_service.get_users_by_source(source_name, page=page, size=_resolve_page_size(size))
    return _to_page_response(result)


@router.get("/configs", response_model=list[ApiConfigurationResponse])
def get_all_configurations(
    config_service: ApiConfigService = Depends(get_api_config_service),
) -> list[ApiConfigurationResponse]:
    return [
        ApiConfigurationResponse.model_validate(configuration)
        for configuration in config_service.get_all_configurations()
    ]


@router.get("/configs/{source_name}", response_model=ApiConfigurationResponse)
def get_configuration(
    source_name: str,
    config_service: ApiConfigService = Depends(get_api_config_service),
) -> ApiConfigurationResponse:
    return ApiConfigurationResponse.model_validate(config_service.get_configuration(source_name))
