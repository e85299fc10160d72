"""Key-value store for generated quizzes, persisted to a JSON file on flush."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)


def generate_cache_key(topic: str, num_questions: int, difficulty: str) -> str:
    """Deterministic key for a generation request, insensitive to case and padding."""
    normalized = f"{topic.strip().lower()}|{num_questions}|{difficulty.strip().lower()}"
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


class QuizCache:
    """In-memory cache of generated quizzes with explicit persistence.

    Entries are loaded from ``cache_file`` on construction. Nothing is written
    until ``flush()`` is called; the server schedules that periodically and
    once more at shutdown.
    """

    def __init__(self, cache_file: Path | None = None) -> None:
        self._cache_file = cache_file
        self._entries: dict[str, dict[str, Any]] = {}
        self._lock = Lock()
        self._dirty = False
        if cache_file is not None:
            self._load()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, quiz: dict[str, Any]) -> None:
        with self._lock:
            self._entries[key] = quiz
            self._dirty = True

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def flush(self) -> bool:
        """Write all entries to the cache file. Returns False when nothing was written."""
        if self._cache_file is None:
            return False
        with self._lock:
            snapshot = dict(self._entries)
            self._dirty = False
        try:
            self._cache_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._cache_file.with_suffix(self._cache_file.suffix + ".tmp")
            tmp_path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self._cache_file)
        except OSError:
            with self._lock:
                self._dirty = True
            logger.exception("Error saving quiz cache to %s", self._cache_file)
            raise
        logger.info("Saved %d quizzes to cache", len(snapshot))
        return True

    def _load(self) -> None:
        if not self._cache_file.exists():
            return
        try:
            data = json.loads(self._cache_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Error loading quiz cache from %s: %s", self._cache_file, exc)
            return
        if not isinstance(data, dict):
            logger.error("Ignoring quiz cache %s: expected a JSON object", self._cache_file)
            return
        self._entries = data
        logger.info("Loaded %d quizzes from cache", len(self._entries))
