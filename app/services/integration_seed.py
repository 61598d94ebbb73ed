"""
app/services/integration_seed.py

Default integration configurations installed on first deployment.
"""

from __future__ import annotations

import logging

from app.exceptions import ApiConfigurationNotFoundError
from app.services.api_config_service import ApiConfigService
from db.models.api_configuration import ApiConfiguration, AuthType, FieldMapping, HttpMethod

logger = logging.getLogger(__name__)

CALENDLY_SOURCE_NAME = "calendly"
_CALENDLY_TOKEN_PLACEHOLDER = "YOUR_CALENDLY_API_TOKEN"

# (internal field, path, required)
_CALENDLY_FIELD_MAPPINGS: tuple[tuple[str, str, bool], ...] = (
    ("externalId", "$.uri", True),
    ("name", "$.name", False),
    ("email", "$.email", False),
    ("timezone", "$.timezone", False),
    ("avatarUrl", "$.avatar_url", False),
    ("createdAt", "$.created_at", False),
)


def build_calendly_configuration(api_token: str | None) -> ApiConfiguration:
    """
    Build the Calendly users integration; the token falls back to a placeholder.
    """

    configuration = ApiConfiguration(
        source_name=CALENDLY_SOURCE_NAME,
        endpoint_url="https://api.calendly.com/users",
        http_method=HttpMethod.GET,
        auth_type=AuthType.BEARER_TOKEN,
        auth_credentials=api_token or _CALENDLY_TOKEN_PLACEHOLDER,
        response_root_path="$.collection",
        is_active=True,
    )
    for field_name, path, required in _CALENDLY_FIELD_MAPPINGS:
        configuration.add_field_mapping(
            FieldMapping(internal_field_name=field_name, json_path=path, required=required)
        )
    return configuration


def seed_default_integrations(
    config_service: ApiConfigService,
    *,
    calendly_api_token: str | None = None,
) -> list[str]:
    """
    Install missing default configurations and return the seeded source names.

    Existing configurations are never overwritten.
    """

    seeded: list[str] = []
    try:
        config_service.get_configuration(CALENDLY_SOURCE_NAME)
        logger.info("Configuration already exists, skipping seed source=%s", CALENDLY_SOURCE_NAME)
    except ApiConfigurationNotFoundError:
        if calendly_api_token is None:
            logger.warning(
                "CALENDLY_API_TOKEN is not set; seeding placeholder credentials source=%s",
                CALENDLY_SOURCE_NAME,
            )
        config_service.save_configuration(build_calendly_configuration(calendly_api_token))
        seeded.append(CALENDLY_SOURCE_NAME)
        logger.info("Seeded API configuration source=%s", CALENDLY_SOURCE_NAME)

    return seeded
