"""Zweistufiger Karten-Cache.

`MemoryCache` lebt nur so lange wie der Prozess; `LocalCache` schreibt JSON-
Dateien in ein Verzeichnis und verwirft Einträge, die älter als die TTL sind.
Beide werden vom `loader.DeckLoader` besessen, nicht global gehalten.
"""

from __future__ import annotations
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, Optional
import json
import os
import re
import time
import uuid

from .logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 6 * 60 * 60

Clock = Callable[[], float]


class MemoryCache:
    """Process-scoped key-value store; entries live until the process exits."""

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return entry["value"]

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = {"timestamp": self._clock(), "value": value}

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class LocalCache:
    """
    Persistent JSON store with TTL eviction on read.

    Each key maps to one file ``<cache_dir>/<safe key>.json`` holding
    ``{"timestamp": <epoch seconds>, "value": ...}``. Corrupt files are
    removed and reported as a miss.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Clock = time.time,
    ):
        self.cache_dir = Path(cache_dir)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _path_for(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", key)
        return self.cache_dir / f"{safe}.json"

    def get(self, key: str, ttl_seconds: float | None = None) -> Optional[Any]:
        path = self._path_for(key)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        if not raw:
            return None
        try:
            entry = json.loads(raw)
            timestamp = float(entry["timestamp"])
            value = entry["value"]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ungueltiger Cache-Eintrag %s verworfen: %s", path, exc)
            self._remove(path)
            return None
        if self._clock() - timestamp > ttl:
            logger.info("Cache-Eintrag %s abgelaufen", key)
            self._remove(path)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        entry = {"timestamp": self._clock(), "value": value}
        # Atomic write: temp file + rename
        temp_file = path.with_name(f"{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with temp_file.open("w", encoding="utf-8") as f:
                json.dump(entry, f, ensure_ascii=False)
            os.replace(temp_file, path)
        except OSError as exc:
            self._remove(temp_file)
            raise RuntimeError(f"Could not write cache file {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        self._remove(self._path_for(key))

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
