"""
Fetch users for one configured source from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging

from app.exceptions import ApplicationError
from app.repositories.api_configuration_repository import ApiConfigurationRepository
from app.repositories.fetched_user_repository import FetchedUserRepository
from app.services.api_config_service import ApiConfigService
from app.services.user_fetch_service import UserFetchService, get_external_api_client
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch and reconcile users from an external source.")
    parser.add_argument("source_name", help="Configured source name, e.g. calendly.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    with SessionLocal() as db:
        service = UserFetchService(
            config_service=ApiConfigService(ApiConfigurationRepository(db)),
            user_store=FetchedUserRepository(db),
            api_client=get_external_api_client(),
        )
        try:
            summary = service.fetch_users_from_source(args.source_name)
        except ApplicationError as exc:
            db.rollback()
            print(json.dumps({"source_name": args.source_name, "error": str(exc)}, indent=2))
            return 1
        db.commit()

    print(
        json.dumps(
            {
                "source_name": summary.source_name,
                "users_fetched": summary.users_fetched,
                "message": summary.message,
            },
            indent=2,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
