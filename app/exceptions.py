"""
app/exceptions.py

Classified failures raised by the integration fetch pipeline.
"""

from __future__ import annotations


class ApplicationError(RuntimeError):
    """Base class for every classified connector failure."""


class ApiConfigurationNotFoundError(ApplicationError):
    """Raised when no configuration exists for a source name."""

    def __init__(self, source_name: str, message: str | None = None) -> None:
        super().__init__(message or f"API configuration not found for source: {source_name}")
        self.source_name = source_name


class ApiConfigurationNotActiveError(ApiConfigurationNotFoundError):
    """Raised when the configuration exists but is switched off."""

    def __init__(self, source_name: str) -> None:
        super().__init__(
            source_name,
            f"API configuration for source {source_name} is not active",
        )


class ExternalApiError(ApplicationError):
    """Raised when the outbound call fails: transport, timeout or non-2xx status."""


class UnsupportedHttpMethodError(ExternalApiError):
    """Raised before any network activity when the configured method cannot be executed."""

    def __init__(self, http_method: str | None) -> None:
        super().__init__(f"Unsupported HTTP method: {http_method}")
        self.http_method = http_method


class FieldMappingError(ApplicationError):
    """Raised when the response cannot be parsed or a required field cannot be extracted."""

    def __init__(self, message: str, *, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name
