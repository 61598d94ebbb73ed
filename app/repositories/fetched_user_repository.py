"""
app/repositories/fetched_user_repository.py

Persistence layer for users fetched from external sources.

The caller controls commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.user_integration import Page
from app.repositories.base import UserStore
from db.base import utc_now
from db.models.fetched_user import FetchedUser

_UPSERT_CONSTRAINT = "uq_fetched_users_source_external_id"


class FetchedUserRepository(UserStore):
    """
    Repository for writing and querying FetchedUser rows.

    Upsert semantics: a row whose ``(source_name, external_id)`` already
    exists is updated in place with a single ``INSERT ... ON CONFLICT DO
    UPDATE``. ``fetched_at`` keeps its first-insert value.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def upsert(
        self,
        *,
        source_name: str,
        external_id: str,
        changes: dict[str, str | None],
        raw_data: dict[str, Any],
    ) -> FetchedUser:
        """
        Upsert one user inside a savepoint.

        A failure rolls back only this user's savepoint, leaving earlier
        writes in the caller's transaction intact.
        """

        now = utc_now()
        stmt = insert(FetchedUser).values(
            id=uuid.uuid4(),
            source_name=source_name,
            external_id=external_id,
            raw_data=raw_data,
            fetched_at=now,
            last_seen_at=now,
            **changes,
        )
        update_set: dict[str, Any] = {column: stmt.excluded[column] for column in changes}
        update_set["raw_data"] = stmt.excluded.raw_data
        update_set["last_seen_at"] = stmt.excluded.last_seen_at
        stmt = (
            stmt.on_conflict_do_update(constraint=_UPSERT_CONSTRAINT, set_=update_set)
            .returning(FetchedUser)
            .execution_options(populate_existing=True)
        )

        with self._session.begin_nested():
            row: FetchedUser = self._session.scalars(stmt).one()
        return row

    def save(self, user: FetchedUser) -> FetchedUser:
        self._session.add(user)
        self._session.flush()
        return user

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def find_by_key(self, source_name: str, external_id: str) -> FetchedUser | None:
        stmt = select(FetchedUser).where(
            FetchedUser.source_name == source_name,
            FetchedUser.external_id == external_id,
        )
        return self._session.execute(stmt).scalars().one_or_none()

    def list_all(self, *, page: int, size: int) -> Page[FetchedUser]:
        return self._paginate(None, page=page, size=size)

    def list_by_source(self, source_name: str, *, page: int, size: int) -> Page[FetchedUser]:
        return self._paginate(source_name, page=page, size=size)

    def _paginate(self, source_name: str | None, *, page: int, size: int) -> Page[FetchedUser]:
        page = max(0, page)
        size = max(1, size)

        count_stmt = select(func.count()).select_from(FetchedUser)
        stmt = select(FetchedUser)
        if source_name is not None:
            count_stmt = count_stmt.where(FetchedUser.source_name == source_name)
            stmt = stmt.where(FetchedUser.source_name == source_name)

        total = int(self._session.execute(count_stmt).scalar_one())
        stmt = (
            stmt.order_by(FetchedUser.fetched_at, FetchedUser.id)
            .offset(page * size)
            .limit(size)
        )
        items = list(self._session.execute(stmt).scalars().all())
        return Page(items=items, page=page, size=size, total_items=total)
