"""
Seed default integration configurations from CLI.
"""

from __future__ import annotations

import json
import logging

from app.config import get_seed_settings
from app.repositories.api_configuration_repository import ApiConfigurationRepository
from app.services.api_config_service import ApiConfigService
from app.services.integration_seed import seed_default_integrations
from db.session import SessionLocal


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    settings = get_seed_settings()
    with SessionLocal() as db:
        seeded = seed_default_integrations(
            ApiConfigService(ApiConfigurationRepository(db)),
            calendly_api_token=settings.calendly_api_token,
        )
        db.commit()

    print(json.dumps({"seeded": seeded}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
