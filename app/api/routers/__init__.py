"""
app/api/routers package marker.
"""

from app.api.routers.user_integration import router as user_integration_router

__all__ = [
    "user_integration_router",
]
