"""
app/repositories package marker.
"""

from app.repositories.api_configuration_repository import ApiConfigurationRepository
from app.repositories.base import ApiConfigurationStore, UserStore
from app.repositories.fetched_user_repository import FetchedUserRepository

__all__ = [
    "ApiConfigurationRepository",
    "ApiConfigurationStore",
    "FetchedUserRepository",
    "UserStore",
]
