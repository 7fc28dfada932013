"""Persistent translation cache backed by a flat JSON file."""

import asyncio
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Optional, Dict, Any, List

from transgate.core.exceptions import CacheError

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 30


class PersistentTranslationCache:
    """
    Translation cache with TTL expiry and wholesale JSON persistence.

    The backing file is one JSON object mapping composite key to
    ``{"value": ..., "createdAt": ...}``. It is read fully by :meth:`load`
    and rewritten fully by :meth:`flush`. Disk errors never reach callers;
    the in-memory map stays authoritative until the next successful flush.
    """

    def __init__(
        self,
        cache_path: str = ".cache/translations.json",
        ttl_days: float = DEFAULT_TTL_DAYS,
        clock=time.time
    ):
        """
        Initialize cache.

        Args:
            cache_path: JSON file used as the backing store
            ttl_days: Entry lifetime in days
            clock: Callable returning epoch seconds (overridable in tests)
        """
        self.cache_path = Path(cache_path)
        self.ttl_seconds = ttl_days * 86400
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._flush_lock = asyncio.Lock()
        self._errors: List[str] = []

    @staticmethod
    def make_key(target_lang: str, text: str) -> str:
        """Build the composite key for (target language, source text)."""
        return json.dumps([target_lang, text], ensure_ascii=False)

    def _is_valid(self, entry: Any, now: float) -> bool:
        if not isinstance(entry, dict):
            return False
        value = entry.get("value")
        created_at = entry.get("createdAt")
        if not value or not isinstance(value, str):
            return False
        if not isinstance(created_at, (int, float)):
            return False
        return now - created_at <= self.ttl_seconds

    def load(self) -> int:
        """
        Load entries from disk, dropping expired or value-less ones.

        Returns:
            Number of entries kept (never raises)
        """
        self._entries = {}
        if not self.cache_path.exists():
            logger.debug(f"No cache file at {self.cache_path}, starting empty")
            return 0

        try:
            raw = json.loads(self.cache_path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise CacheError(
                    "Cache file does not contain a JSON object",
                    path=str(self.cache_path),
                    operation="load"
                )
        except (OSError, ValueError, CacheError) as e:
            error_msg = f"Cache load failed: {e}"
            self._errors.append(error_msg)
            logger.warning(f"{error_msg}. Starting with an empty cache.")
            return 0

        now = self._clock()
        dropped = 0
        for key, entry in raw.items():
            if self._is_valid(entry, now):
                self._entries[key] = {"value": entry["value"], "createdAt": entry["createdAt"]}
            else:
                dropped += 1

        logger.info(f"Loaded {len(self._entries)} cached translations ({dropped} expired or invalid)")
        return len(self._entries)

    def get(self, target_lang: str, text: str) -> Optional[str]:
        """
        Look up a cached translation.

        Returns:
            Cached translation or None. Expired entries are treated as misses
            but left in place until the next load.
        """
        entry = self._entries.get(self.make_key(target_lang, text))
        if entry and self._is_valid(entry, self._clock()):
            return entry["value"]
        return None

    def put(self, target_lang: str, text: str, value: str) -> None:
        """Insert or overwrite a translation. Falsy values are ignored."""
        if not value or not isinstance(value, str):
            return
        self._entries[self.make_key(target_lang, text)] = {
            "value": value,
            "createdAt": self._clock()
        }

    def discard(self, target_lang: str, text: str) -> bool:
        """Remove one entry. Returns True if it was present."""
        return self._entries.pop(self.make_key(target_lang, text), None) is not None

    def _write(self, snapshot: Dict[str, Dict[str, Any]]) -> None:
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.cache_path.parent),
            prefix=self.cache_path.name,
            suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False)
            os.replace(tmp_name, self.cache_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def flush(self) -> bool:
        """
        Persist the whole in-memory map.

        Returns:
            True on success, False if the write failed (never raises)
        """
        async with self._flush_lock:
            snapshot = dict(self._entries)
            try:
                await asyncio.to_thread(self._write, snapshot)
            except OSError as e:
                error_msg = f"Cache flush failed: {e}"
                self._errors.append(error_msg)
                logger.warning(f"{error_msg}. Keeping translations in memory only.")
                return False
        logger.debug(f"Flushed {len(snapshot)} cached translations to {self.cache_path}")
        return True

    def clear(self) -> None:
        """Drop every entry from memory (the file is rewritten on next flush)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        stats: Dict[str, Any] = {
            "size": len(self._entries),
            "location": str(self.cache_path),
            "ttl_days": self.ttl_seconds / 86400,
            "errors": len(self._errors)
        }
        if self._errors:
            stats["recent_errors"] = self._errors[-5:]
        return stats
