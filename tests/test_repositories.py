"""
SQL shape of the SQLAlchemy stores, compiled for PostgreSQL without a database.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any

from sqlalchemy.dialects import postgresql

from app.repositories.api_configuration_repository import ApiConfigurationRepository
from app.repositories.fetched_user_repository import FetchedUserRepository


class _Rows:
    def __init__(self, rows: list[Any]) -> None:
        self._rows = rows

    def scalars(self) -> "_Rows":
        return self

    def one(self) -> Any:
        assert len(self._rows) == 1
        return self._rows[0]

    def one_or_none(self) -> Any:
        return self._rows[0] if self._rows else None

    def all(self) -> list[Any]:
        return list(self._rows)

    def scalar_one(self) -> Any:
        return self.one()


class StatementRecordingSession:
    """Captures executed statements and answers with canned rows."""

    def __init__(self, *results: list[Any]) -> None:
        self.results = list(results)
        self.statements: list[Any] = []
        self.savepoints = 0

    def _next(self, stmt: Any) -> _Rows:
        self.statements.append(stmt)
        return _Rows(self.results.pop(0) if self.results else [])

    def execute(self, stmt: Any) -> _Rows:
        return self._next(stmt)

    def scalars(self, stmt: Any) -> _Rows:
        return self._next(stmt)

    @contextmanager
    def begin_nested(self):
        self.savepoints += 1
        yield


def _sql(stmt: Any) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def _set_clause(sql: str) -> str:
    return sql.split("DO UPDATE SET", 1)[1].split("RETURNING", 1)[0]


class TestFetchedUserUpsert:
    def test_update_only_touches_present_columns(self) -> None:
        stored = object()
        session = StatementRecordingSession([stored])

        result = FetchedUserRepository(session).upsert(
            source_name="calendly",
            external_id="u-1",
            changes={"email": "ada@example.com", "timezone": None},
            raw_data={"externalId": "u-1", "email": "ada@example.com", "timezone": None},
        )

        assert result is stored
        assert session.savepoints == 1
        sql = _sql(session.statements[0])
        assert "ON CONFLICT ON CONSTRAINT uq_fetched_users_source_external_id DO UPDATE SET" in sql
        set_clause = _set_clause(sql)
        assert "email = excluded.email" in set_clause
        assert "timezone = excluded.timezone" in set_clause
        assert "raw_data = excluded.raw_data" in set_clause
        assert "last_seen_at = excluded.last_seen_at" in set_clause
        assert "fetched_at" not in set_clause
        assert "name = excluded.name" not in set_clause
        assert "avatar_url" not in set_clause
        assert "RETURNING fetched_users.id" in sql

    def test_record_without_mutable_fields_still_refreshes_raw_data(self) -> None:
        session = StatementRecordingSession([object()])

        FetchedUserRepository(session).upsert(
            source_name="calendly",
            external_id="u-1",
            changes={},
            raw_data={"externalId": "u-1"},
        )

        set_clause = _set_clause(_sql(session.statements[0]))
        assert [part.split("=")[0].strip() for part in set_clause.split(",")] == ["raw_data", "last_seen_at"]

    def test_insert_sets_first_fetch_time(self) -> None:
        session = StatementRecordingSession([object()])

        FetchedUserRepository(session).upsert(
            source_name="calendly",
            external_id="u-1",
            changes={"name": "Ada"},
            raw_data={"externalId": "u-1", "name": "Ada"},
        )

        insert_part = _sql(session.statements[0]).split("ON CONFLICT", 1)[0]
        for column in ("source_name", "external_id", "name", "raw_data", "fetched_at", "last_seen_at"):
            assert column in insert_part
        assert "email" not in insert_part

    def test_listing_by_source_pages_in_fetch_order(self) -> None:
        users = [object(), object()]
        session = StatementRecordingSession([5], users)

        page = FetchedUserRepository(session).list_by_source("calendly", page=1, size=2)

        assert page.total_items == 5
        assert page.total_pages == 3
        assert list(page.items) == users
        count_sql, list_sql = (_sql(stmt) for stmt in session.statements)
        assert "count(*)" in count_sql
        assert "fetched_users.source_name = %(source_name_1)s" in count_sql
        assert "ORDER BY fetched_users.fetched_at, fetched_users.id" in list_sql
        assert "LIMIT %(param_1)s OFFSET %(param_2)s" in list_sql


class TestApiConfigurationLookup:
    def test_active_lookup_filters_on_flag(self) -> None:
        configuration = object()
        session = StatementRecordingSession([configuration])

        found = ApiConfigurationRepository(session).find_active_by_source_name("  calendly ")

        assert found is configuration
        compiled = session.statements[0].compile(dialect=postgresql.dialect())
        sql = str(compiled).lower()
        assert "api_configurations.source_name = %(source_name_1)s" in sql
        assert "api_configurations.is_active is true" in sql
        assert compiled.params["source_name_1"] == "calendly"

    def test_plain_lookup_ignores_flag(self) -> None:
        session = StatementRecordingSession([])

        assert ApiConfigurationRepository(session).find_by_source_name("missing") is None
        assert "is_active" not in _sql(session.statements[0]).split("WHERE", 1)[1]

    def test_list_all_is_ordered_by_source(self) -> None:
        session = StatementRecordingSession([])

        ApiConfigurationRepository(session).list_all()

        assert "ORDER BY api_configurations.source_name" in _sql(session.statements[0])
