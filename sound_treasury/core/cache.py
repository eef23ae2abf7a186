"""
Cache tiers for the dashboard data core.

- SessionCache: in-process values for the lifetime of one running session.
  No TTL; it only shrinks through explicit invalidation.
- PersistedCache: JSON files on disk that survive across sessions, valid
  for a fixed TTL measured from the timestamp written inside the entry.

Both are plain service objects. Build them once at startup and hand them to
the orchestrator; they are never module-level singletons.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from sound_treasury.constants import DEFAULT_CACHE_DIR, PERSISTED_CACHE_TTL_HOURS
from sound_treasury.exceptions import InvalidPayload, StorageFailure
from sound_treasury.logging_config import get_logger
from sound_treasury.models.records import CacheEntry

logger = get_logger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """Either a value (possibly None for a miss) or a StorageFailure."""

    value: Optional[T] = None
    error: Optional[StorageFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StorageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str, cause: Optional[BaseException] = None) -> "StorageResult[T]":
        error = StorageFailure(message)
        error.__cause__ = cause
        return cls(error=error)


class SessionCache:
    """
    In-process cache keyed by (domain, key).

    Example:
        cache = SessionCache()
        cache.set("sector", "chemicals", snapshot)
        cache.get("sector", "chemicals")
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, Hashable], Any] = {}

    def get(self, domain: str, key: Hashable = None) -> Optional[Any]:
        value = self._entries.get((domain, key))
        logger.debug("Session cache %s: %s/%s", "hit" if value is not None else "miss", domain, key)
        return value

    def set(self, domain: str, key: Hashable, value: Any) -> None:
        self._entries[(domain, key)] = value

    def invalidate(self, domain: Optional[str] = None, key: Hashable = None) -> int:
        """
        Drop entries. No domain clears everything; a domain without a key
        clears the whole domain.

        Returns:
            Number of entries removed
        """
        if domain is None:
            doomed = list(self._entries)
        elif key is None:
            doomed = [k for k in self._entries if k[0] == domain]
        else:
            doomed = [(domain, key)] if (domain, key) in self._entries else []
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def __contains__(self, item: Tuple[str, Hashable]) -> bool:
        return item in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class PersistedCache:
    """
    File-based cache for the model series tuple.

    An entry is valid while now - written_at < ttl; an entry written
    exactly ttl ago is expired. Writes go to a temporary file that is
    renamed over the target, so a failed write leaves the previous entry
    intact.
    """

    def __init__(
        self,
        cache_dir: str = DEFAULT_CACHE_DIR,
        ttl_hours: float = PERSISTED_CACHE_TTL_HOURS,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the persisted cache.

        Args:
            cache_dir: Directory to store cache files (created lazily)
            ttl_hours: Entry validity in hours
            clock: Source of "now", injectable for tests
        """
        self.cache_dir = Path(cache_dir)
        self.ttl = timedelta(hours=ttl_hours)
        self.clock = clock

    def _get_cache_path(self, key: str) -> Path:
        """Generate cache file path for a key."""
        safe_key = key.replace("/", "_").replace("\\", "_").replace(":", "_")
        return self.cache_dir / f"{safe_key}.json"

    def is_fresh(self, written_at: datetime, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        return now - written_at < self.ttl

    def get(self, key: str) -> StorageResult[CacheEntry]:
        """
        Read an entry.

        Returns:
            success(entry) on a fresh hit, success(None) on a miss or an
            expired entry, failure(...) when the file cannot be read or parsed
        """
        path = self._get_cache_path(key)
        if not path.exists():
            logger.debug("Persisted cache miss: %s", key)
            return StorageResult.success(None)

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            entry = CacheEntry.from_storage_dict(raw)
        except (OSError, ValueError, InvalidPayload) as e:
            logger.warning("Failed to read persisted cache %s: %s", key, e)
            return StorageResult.failure(f"Unreadable cache entry '{key}': {e}", e)

        if not self.is_fresh(entry.written_at):
            logger.debug("Persisted cache expired: %s (written %s)", key, entry.written_at.isoformat())
            return StorageResult.success(None)

        logger.debug("Persisted cache hit: %s", key)
        return StorageResult.success(entry)

    def set(self, key: str, entry: CacheEntry) -> StorageResult[CacheEntry]:
        """Write an entry atomically."""
        path = self._get_cache_path(key)
        tmp_name = None
        try:
            body = json.dumps(entry.to_storage_dict())
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.cache_dir, prefix=f".{path.stem}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(body)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            logger.debug("Cached (json): %s", key)
            return StorageResult.success(entry)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to cache %s: %s", key, e)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return StorageResult.failure(f"Could not write cache entry '{key}': {e}", e)

    def invalidate(self, key: str) -> None:
        """Remove a cache entry."""
        path = self._get_cache_path(key)
        if path.exists():
            try:
                path.unlink()
                logger.debug("Invalidated cache: %s", key)
            except OSError as e:
                logger.warning("Failed to invalidate cache %s: %s", key, e)

    def clear_all(self) -> int:
        """
        Clear all cache files.

        Returns:
            Number of files deleted
        """
        count = 0
        if not self.cache_dir.exists():
            return count
        for file_path in self.cache_dir.glob("*.json"):
            try:
                file_path.unlink()
                count += 1
            except OSError as e:
                logger.warning("Could not delete %s: %s", file_path, e)
        logger.info("Cleared %d cache files", count)
        return count
