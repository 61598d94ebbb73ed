"""
app/connectors package marker.
"""

from app.connectors.external_api_client import ExternalApiClient

__all__ = [
    "ExternalApiClient",
]
