"""
Shared in-memory doubles for connector tests.

No database and no network: stores are dict-backed and the outbound
``requests.Session`` is replaced with a recorder that returns queued
responses.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import pytest
import requests

from app.config import ExternalHTTPSettings
from app.domain.user_integration import Page
from app.repositories.base import ApiConfigurationStore, UserStore
from db.models.api_configuration import ApiConfiguration, AuthType, FieldMapping, HttpMethod
from db.models.fetched_user import FetchedUser


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class InMemoryConfigurationStore(ApiConfigurationStore):
    def __init__(self) -> None:
        self.configurations: dict[str, ApiConfiguration] = {}

    def find_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        return self.configurations.get(source_name.strip())

    def find_active_by_source_name(self, source_name: str) -> ApiConfiguration | None:
        configuration = self.find_by_source_name(source_name)
        if configuration is None or not configuration.is_active:
            return None
        return configuration

    def list_all(self) -> list[ApiConfiguration]:
        return [self.configurations[name] for name in sorted(self.configurations)]

    def save(self, configuration: ApiConfiguration) -> ApiConfiguration:
        if configuration.id is None:
            configuration.id = uuid.uuid4()
        self.configurations[configuration.source_name] = configuration
        return configuration


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self.users: dict[tuple[str, str], FetchedUser] = {}
        self.failing_external_ids: set[str] = set()

    def find_by_key(self, source_name: str, external_id: str) -> FetchedUser | None:
        return self.users.get((source_name, external_id))

    def upsert(
        self,
        *,
        source_name: str,
        external_id: str,
        changes: dict[str, str | None],
        raw_data: dict[str, Any],
    ) -> FetchedUser:
        if external_id in self.failing_external_ids:
            raise RuntimeError(f"write rejected for {external_id}")

        now = datetime.now(timezone.utc)
        user = self.users.get((source_name, external_id))
        if user is None:
            user = FetchedUser(
                id=uuid.uuid4(),
                source_name=source_name,
                external_id=external_id,
                fetched_at=now,
            )
            self.users[(source_name, external_id)] = user

        for column, value in changes.items():
            setattr(user, column, value)
        user.raw_data = raw_data
        user.last_seen_at = now
        return user

    def save(self, user: FetchedUser) -> FetchedUser:
        if user.id is None:
            user.id = uuid.uuid4()
        self.users[(user.source_name, user.external_id)] = user
        return user

    def list_all(self, *, page: int, size: int) -> Page[FetchedUser]:
        return self._page(list(self.users.values()), page=page, size=size)

    def list_by_source(self, source_name: str, *, page: int, size: int) -> Page[FetchedUser]:
        users = [user for user in self.users.values() if user.source_name == source_name]
        return self._page(users, page=page, size=size)

    @staticmethod
    def _page(users: list[FetchedUser], *, page: int, size: int) -> Page[FetchedUser]:
        start = page * size
        return Page(items=users[start : start + size], page=page, size=size, total_items=len(users))


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


def make_response(
    status_code: int = 200,
    body: str | bytes = b"",
    *,
    url: str = "https://api.example.com/users",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build a fully-read ``requests.Response``."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.headers.update(headers or {})
    response.reason = "OK" if status_code < 400 else "Error"
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response._content_consumed = True
    return response


class DripStream:
    """
    Raw body that receives one byte per interval until closed.

    Like a socket-backed stream, a chunk is only handed out once
    ``chunk_size`` bytes have arrived or the body is complete.
    """

    def __init__(self, body: bytes, interval_seconds: float) -> None:
        self.body = body
        self.interval_seconds = interval_seconds
        self.closed = False

    def stream(self, chunk_size: int, decode_content: bool = True):
        buffered = b""
        for index in range(len(self.body)):
            if self.closed:
                return
            time.sleep(self.interval_seconds)
            buffered += self.body[index : index + 1]
            if len(buffered) >= chunk_size:
                yield buffered
                buffered = b""
        if buffered:
            yield buffered

    def close(self) -> None:
        self.closed = True


def make_streaming_response(raw: DripStream, *, status_code: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = "https://api.example.com/users"
    response.reason = "OK"
    response.raw = raw
    return response


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    kwargs: dict[str, Any] = field(default_factory=dict)


class RecordingSession:
    """
    Stand-in for ``requests.Session`` that records every request.

    Each queued item is either a response to return or an exception to raise.
    """

    def __init__(self, *outcomes: requests.Response | Exception) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[RecordedRequest] = []

    def request(self, method: str, url: str, headers: dict[str, str] | None = None, **kwargs: Any) -> requests.Response:
        self.requests.append(RecordedRequest(method=method, url=url, headers=dict(headers or {}), kwargs=kwargs))
        if not self.outcomes:
            raise AssertionError("Unexpected outbound request")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def http_settings() -> ExternalHTTPSettings:
    return ExternalHTTPSettings(
        connect_timeout_seconds=10.0,
        response_timeout_seconds=30.0,
        body_timeout_seconds=30.0,
    )


@pytest.fixture()
def config_store() -> InMemoryConfigurationStore:
    return InMemoryConfigurationStore()


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def make_configuration() -> Callable[..., ApiConfiguration]:
    """Factory for transient configurations with optional mappings."""

    def _make(
        *,
        source_name: str = "test",
        endpoint_url: str = "http://localhost:8080/api/users",
        http_method: str = HttpMethod.GET,
        auth_type: str = AuthType.BEARER_TOKEN,
        auth_credentials: str | None = "test-token",
        request_headers: str | None = None,
        response_root_path: str | None = None,
        is_active: bool = True,
        mappings: list[tuple[str, str, bool] | tuple[str, str, bool, str | None]] | None = None,
    ) -> ApiConfiguration:
        configuration = ApiConfiguration(
            source_name=source_name,
            endpoint_url=endpoint_url,
            http_method=http_method,
            auth_type=auth_type,
            auth_credentials=auth_credentials,
            request_headers=request_headers,
            response_root_path=response_root_path,
            is_active=is_active,
        )
        for mapping in mappings or []:
            internal_name, path, required = mapping[0], mapping[1], mapping[2]
            default_value = mapping[3] if len(mapping) > 3 else None
            configuration.add_field_mapping(
                FieldMapping(
                    internal_field_name=internal_name,
                    json_path=path,
                    required=required,
                    default_value=default_value,
                )
            )
        return configuration

    return _make


@pytest.fixture()
def response_factory() -> Callable[..., requests.Response]:
    return make_response


@pytest.fixture()
def session_factory() -> Callable[..., RecordingSession]:
    return RecordingSession


@pytest.fixture()
def drip_response_factory() -> Callable[..., requests.Response]:
    def _make(body: bytes, *, interval_seconds: float) -> requests.Response:
        return make_streaming_response(DripStream(body, interval_seconds))

    return _make
