"""
app/services package marker.
"""

from app.services.api_config_service import ApiConfigService
from app.services.user_fetch_service import (
    UserFetchService,
    get_api_config_service,
    get_external_api_client,
    get_user_fetch_service,
)
from app.services.user_reconciler import UserReconciler, build_user_changes

__all__ = [
    "ApiConfigService",
    "UserFetchService",
    "UserReconciler",
    "build_user_changes",
    "get_api_config_service",
    "get_external_api_client",
    "get_user_fetch_service",
]
