"""
app/repositories package marker.
"""

from app.repositories.history_repository import (
    HistoryNotFoundError,
    HistoryRepository,
    HistoryStorageError,
    get_history_repository,
)

__all__ = [
    "HistoryNotFoundError",
    "HistoryRepository",
    "HistoryStorageError",
    "get_history_repository",
]
