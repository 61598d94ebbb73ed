"""
app/domain package marker.
"""

from app.domain.user_integration import FetchUsersSummary, Page, ReconciliationResult, RecordFailure

__all__ = [
    "FetchUsersSummary",
    "Page",
    "ReconciliationResult",
    "RecordFailure",
]
