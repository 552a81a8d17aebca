"""
app/repositories/history_repository.py

Bounded, most-recent-first history of analysis snapshots.

Snapshots are kept in memory and, when a path is configured, mirrored to a
JSON file after every change. Writes go through a temp file and an atomic
replace so a crash never leaves a half-written history behind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from functools import lru_cache
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from app.config import get_report_settings
from app.domain.earnings import AnalysisResult
from app.schemas.earnings import AnalysisResultRecord

logger = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[AnalysisResultRecord])


class HistoryNotFoundError(KeyError):
    """Raised when a history entry with the requested id does not exist."""


class HistoryStorageError(RuntimeError):
    """Raised when the history file cannot be written."""


class HistoryRepository:
    """
    Ordered store of at most ``capacity`` analysis results.

    The newest result is first; adding beyond capacity evicts the oldest.
    """

    def __init__(self, path: str | Path | None = None, *, capacity: int = 10) -> None:
        self._path = Path(path) if path is not None else None
        self._capacity = max(1, capacity)
        self._lock = threading.Lock()
        self._entries: list[AnalysisResult] = self._load()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def path(self) -> Path | None:
        return self._path

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_results(self) -> list[AnalysisResult]:
        with self._lock:
            return list(self._entries)

    def get(self, result_id: str) -> AnalysisResult | None:
        with self._lock:
            return self._find(result_id)

    def require(self, result_id: str) -> AnalysisResult:
        result = self.get(result_id)
        if result is None:
            raise HistoryNotFoundError(result_id)
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, result: AnalysisResult) -> list[AnalysisResult]:
        """
        Insert *result* at the front and return the entries evicted by it.

        History is left untouched when the write fails.
        """

        with self._lock:
            entries = [entry for entry in self._entries if entry.id != result.id]
            entries.insert(0, result)
            evicted = entries[self._capacity:]
            kept = entries[: self._capacity]
            self._save(kept)
            self._entries = kept

        for entry in evicted:
            logger.info("Evicted history entry id=%s file=%r", entry.id, entry.file_name)
        return evicted

    def remove(self, result_id: str) -> bool:
        with self._lock:
            remaining = [entry for entry in self._entries if entry.id != result_id]
            if len(remaining) == len(self._entries):
                return False
            self._save(remaining)
            self._entries = remaining
        logger.info("Removed history entry id=%s", result_id)
        return True

    def attach_insight(self, result_id: str, insight: str) -> AnalysisResult | None:
        """
        Store *insight* on the entry with *result_id*, keeping its position.

        Returns None without touching anything when the entry is gone.
        """

        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id == result_id:
                    updated = replace(entry, ai_insight=insight)
                    entries = list(self._entries)
                    entries[index] = updated
                    self._save(entries)
                    self._entries = entries
                    return updated
        logger.info("Insight for id=%s dropped; entry no longer in history", result_id)
        return None

    def clear(self) -> None:
        with self._lock:
            self._save([])
            self._entries = []

    # ------------------------------------------------------------------
    # Persistence internals
    # ------------------------------------------------------------------

    def _find(self, result_id: str) -> AnalysisResult | None:
        for entry in self._entries:
            if entry.id == result_id:
                return entry
        return None

    def _load(self) -> list[AnalysisResult]:
        if self._path is None or not self._path.exists():
            return []
        try:
            records = _RECORDS_ADAPTER.validate_json(self._path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.warning("History file %s unreadable, starting empty: %s", self._path, exc)
            return []
        return [record.to_domain() for record in records][: self._capacity]

    def _save(self, entries: list[AnalysisResult]) -> None:
        if self._path is None:
            return
        payload = _RECORDS_ADAPTER.dump_json(
            [AnalysisResultRecord.from_domain(entry) for entry in entries],
            indent=2,
        )
        tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(payload)
            tmp_path.replace(self._path)
        except OSError as exc:
            raise HistoryStorageError("Failed to write history file.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass


@lru_cache(maxsize=1)
def get_history_repository() -> HistoryRepository:
    """
    Build and cache the history repository with env-driven settings.
    """
    settings = get_report_settings()
    return HistoryRepository(settings.history_path, capacity=settings.history_capacity)
