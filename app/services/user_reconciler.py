"""
app/services/user_reconciler.py

Upserts normalized user records against stored users for one source.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from app.domain.user_integration import ReconciliationResult, RecordFailure
from app.mappers.response_mapper import NormalizedUserRecord
from app.repositories.base import UserStore
from db.models.fetched_user import EXTERNAL_ID_FIELD, MUTABLE_USER_FIELDS

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True)


def build_user_changes(record: NormalizedUserRecord) -> dict[str, str | None]:
    """
    Map the mutable fields present in a record onto user columns.

    Fields absent from the record are left out entirely, so an update
    never clears a value stored by an earlier fetch.
    """

    return {
        column: _as_text(record[field_name])
        for field_name, column in MUTABLE_USER_FIELDS.items()
        if field_name in record
    }


class UserReconciler:
    """
    Per-record fault isolated upsert of normalized records.

    A record without an external id or a record whose write fails is
    logged and counted; the rest of the batch is still processed.
    """

    def __init__(self, user_store: UserStore) -> None:
        self._user_store = user_store

    def reconcile(
        self,
        source_name: str,
        records: Sequence[NormalizedUserRecord],
    ) -> ReconciliationResult:
        saved = 0
        failures: list[RecordFailure] = []

        for index, record in enumerate(records):
            raw_external_id = record.get(EXTERNAL_ID_FIELD)
            # Only an absent or null id is rejected; "" is a valid key.
            if raw_external_id is None:
                logger.error(
                    "Skipping user without external id source=%s index=%s",
                    source_name,
                    index,
                )
                failures.append(
                    RecordFailure(index=index, reason=f"Required field missing: {EXTERNAL_ID_FIELD}")
                )
                continue

            external_id = _as_text(raw_external_id)
            try:
                self._user_store.upsert(
                    source_name=source_name,
                    external_id=external_id,
                    changes=build_user_changes(record),
                    raw_data=dict(record),
                )
            except Exception as exc:
                logger.exception(
                    "Failed to save user source=%s external_id=%s error=%s",
                    source_name,
                    external_id,
                    exc,
                )
                failures.append(RecordFailure(index=index, reason=str(exc), external_id=external_id))
                continue

            saved += 1
            logger.debug("Saved user source=%s external_id=%s", source_name, external_id)

        return ReconciliationResult(total=len(records), saved=saved, failures=failures)
