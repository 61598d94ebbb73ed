"""
app/connectors/external_api_client.py

Generic outbound caller driven entirely by a stored API configuration.
"""

from __future__ import annotations

import codecs
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import requests

from app.config import ExternalHTTPSettings
from app.exceptions import ExternalApiError, UnsupportedHttpMethodError
from db.models.api_configuration import ApiConfiguration, AuthType, HttpMethod

logger = logging.getLogger(__name__)

_BODY_CHUNK_SIZE = 8192
_DEFAULT_CHARSET = "utf-8"


class ExternalApiClient:
    """
    Executes one request per configuration and returns the raw body.

    There is exactly one attempt per call: failures are surfaced as
    ExternalApiError, never retried or masked.
    """

    def __init__(
        self,
        *,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._connect_timeout_seconds = http_settings.connect_timeout_seconds
        self._response_timeout_seconds = http_settings.response_timeout_seconds
        self._body_timeout_seconds = http_settings.body_timeout_seconds

    def call(self, config: ApiConfiguration) -> str:
        """
        Call the configured endpoint and return the response body as text.
        """

        method = (config.http_method or "").strip().upper()
        if method not in HttpMethod.EXECUTABLE:
            logger.error(
                "Unsupported HTTP method source=%s method=%s",
                config.source_name,
                config.http_method,
            )
            raise UnsupportedHttpMethodError(config.http_method)

        headers = self.build_headers(config)
        logger.info(
            "Calling external API source=%s method=%s url=%s",
            config.source_name,
            method,
            config.endpoint_url,
        )

        try:
            response = self._session.request(
                method=method,
                url=config.endpoint_url,
                headers=headers,
                timeout=(self._connect_timeout_seconds, self._response_timeout_seconds),
                stream=True,
            )
        except requests.Timeout as exc:
            logger.error("External API timed out source=%s url=%s error=%s", config.source_name, config.endpoint_url, exc)
            raise ExternalApiError(f"External API call timed out for source: {config.source_name}") from exc
        except requests.RequestException as exc:
            logger.error("External API transport failure source=%s url=%s error=%s", config.source_name, config.endpoint_url, exc)
            raise ExternalApiError(f"Failed to call external API for source: {config.source_name}") from exc

        try:
            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                logger.error(
                    "External API returned error status source=%s status=%s url=%s",
                    config.source_name,
                    response.status_code,
                    config.endpoint_url,
                )
                raise ExternalApiError(
                    f"External API call failed for source: {config.source_name} "
                    f"(status {response.status_code})"
                ) from exc

            body = self._read_body(response, config)
        finally:
            response.close()

        logger.info("Received response source=%s bytes=%s", config.source_name, len(body))
        return body

    def build_headers(self, config: ApiConfiguration) -> dict[str, str]:
        """
        Resolve auth and custom headers for one configuration.
        """

        headers: dict[str, str] = {}
        credentials = config.auth_credentials
        auth_type = config.auth_type or AuthType.NONE

        if auth_type == AuthType.BEARER_TOKEN:
            if credentials is not None:
                headers["Authorization"] = f"Bearer {credentials}"
        elif auth_type == AuthType.API_KEY:
            if credentials is not None:
                headers["Authorization"] = credentials
        elif auth_type == AuthType.BASIC_AUTH:
            logger.warning(
                "Basic auth is not implemented; sending request without credentials source=%s",
                config.source_name,
            )
        elif auth_type != AuthType.NONE:
            logger.warning("Unknown auth type source=%s auth_type=%s", config.source_name, auth_type)

        raw_headers = config.request_headers
        if raw_headers is not None and raw_headers.strip():
            headers.update(self._parse_custom_headers(raw_headers, config.source_name))

        return headers

    @staticmethod
    def _parse_custom_headers(raw_headers: str, source_name: str) -> dict[str, str]:
        try:
            parsed = json.loads(raw_headers)
        except ValueError as exc:
            logger.warning("Failed to parse custom headers, skipping source=%s error=%s", source_name, exc)
            return {}

        if not isinstance(parsed, dict):
            logger.warning(
                "Custom headers must be a JSON object, skipping source=%s type=%s",
                source_name,
                type(parsed).__name__,
            )
            return {}

        return {str(key): str(value) for key, value in parsed.items() if value is not None}

    def _read_body(self, response: requests.Response, config: ApiConfiguration) -> str:
        """
        Read the streamed body under a hard wall-clock cap and decode it.

        The read runs on a worker thread; when the cap expires the caller
        gets ExternalApiError at once and the connection is closed.
        """

        reader = ThreadPoolExecutor(max_workers=1, thread_name_prefix="external-api-body")
        try:
            future = reader.submit(_drain, response)
            try:
                raw_body = future.result(timeout=self._body_timeout_seconds)
            except FutureTimeoutError as exc:
                logger.error(
                    "External API body read exceeded cap source=%s cap_seconds=%.1f",
                    config.source_name,
                    self._body_timeout_seconds,
                )
                response.close()
                raise ExternalApiError(
                    f"External API response body timed out for source: {config.source_name}"
                ) from exc
            except requests.RequestException as exc:
                logger.error("External API body read failed source=%s error=%s", config.source_name, exc)
                raise ExternalApiError(
                    f"Failed to read external API response for source: {config.source_name}"
                ) from exc
        finally:
            reader.shutdown(wait=False)

        return _decode_body(raw_body, response, config.source_name)


def _drain(response: requests.Response) -> bytes:
    return b"".join(chunk for chunk in response.iter_content(chunk_size=_BODY_CHUNK_SIZE) if chunk)


def _declared_charset(response: requests.Response) -> str | None:
    """
    Charset parameter of the Content-Type header, if the server sent one.

    Bodies without a declared charset are read as UTF-8, not as the
    ISO-8859-1 requests assumes for ``text/*``.
    """

    content_type = response.headers.get("Content-Type") or ""
    for parameter in content_type.split(";")[1:]:
        key, _, value = parameter.partition("=")
        if key.strip().lower() == "charset":
            charset = value.strip().strip("\"'")
            return charset or None
    return None


def _decode_body(raw_body: bytes, response: requests.Response, source_name: str) -> str:
    charset = _declared_charset(response) or _DEFAULT_CHARSET
    try:
        codecs.lookup(charset)
    except LookupError:
        logger.warning("Unknown response charset, using utf-8 source=%s charset=%s", source_name, charset)
        charset = _DEFAULT_CHARSET

    try:
        return raw_body.decode(charset)
    except UnicodeDecodeError as exc:
        logger.warning(
            "Response body is not valid %s, replacing invalid bytes source=%s error=%s",
            charset,
            source_name,
            exc,
        )
        return raw_body.decode(charset, errors="replace")
