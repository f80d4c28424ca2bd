#START src/dexvotes/infrastructure/cache.py
import hashlib
import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from dexvotes.domain.entities import PNG_MEDIA_TYPE, SVG_MEDIA_TYPE, PreviewImageArtifact

log = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")
MAX_KEY_LENGTH = 64
_DIGEST_LENGTH = 12


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at_ms: int


def sanitize_key(key: str) -> str:
    """
    Reduces a key to [A-Za-z0-9_-], at most MAX_KEY_LENGTH characters.

    A key that had to be stripped or shortened gets a digest of the original
    appended, so distinct keys never map to the same file name. Returns "" when
    nothing safe is left.
    """
    key = key or ""
    safe = _UNSAFE_KEY_CHARS.sub("", key)
    if not safe or (safe == key and len(safe) <= MAX_KEY_LENGTH):
        return safe
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    return f"{safe[:MAX_KEY_LENGTH - _DIGEST_LENGTH - 1]}-{digest}"


class InMemoryCache:
    """
    A simple in-memory cache with a single Time-To-Live (TTL).

    Entries are stored with the time they were fetched; an entry whose age has
    reached the TTL is treated as absent. There is no locking: two concurrent
    misses on one key both fetch and the last `set` wins.
    """

    def __init__(self, ttl_seconds: int = 300, clock: Clock = time.time):
        """
        :param ttl_seconds: lifespan of every entry.
        :param clock: returns the current time in epoch seconds; injectable for tests.
        """
        self._cache: Dict[str, CacheEntry[Any]] = {}
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def is_expired(self, entry: CacheEntry[Any]) -> bool:
        return self.now_ms() - entry.fetched_at_ms >= self._ttl_ms

    def peek(self, key: str) -> Optional[CacheEntry[Any]]:
        """Returns the stored entry even if it has expired."""
        return self._cache.get(key)

    def get(self, key: str) -> Optional[CacheEntry[Any]]:
        """
        Retrieves an entry if it exists and has not expired.
        """
        entry = self._cache.get(key)
        if entry is None or self.is_expired(entry):
            return None
        return entry

    def set(self, key: str, value: Any) -> CacheEntry[Any]:
        entry = CacheEntry(value=value, fetched_at_ms=self.now_ms())
        self._cache[key] = entry
        return entry

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


class NullCache(InMemoryCache):
    """Never stores anything; used when preview images are streamed uncached."""

    def __init__(self, clock: Clock = time.time):
        super().__init__(ttl_seconds=0, clock=clock)

    def get(self, key: str) -> Optional[CacheEntry[Any]]:
        return None

    def set(self, key: str, value: Any) -> CacheEntry[Any]:
        return CacheEntry(value=value, fetched_at_ms=self.now_ms())


class FileArtifactStore(InMemoryCache):
    """
    Disk-backed store for preview artifacts, one file per address.

    The file's mtime is the fetch timestamp, so expiry survives process
    restarts. Keys are sanitized before they touch the filesystem.
    """

    _EXTENSIONS = {PNG_MEDIA_TYPE: ".png", SVG_MEDIA_TYPE: ".svg"}

    def __init__(self, directory: str, ttl_seconds: int = 300, clock: Clock = time.time):
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str, media_type: str) -> Path:
        safe = sanitize_key(key)
        if not safe:
            raise ValueError(f"Cache key '{key}' has no filesystem-safe characters")
        return self.directory / f"{safe}{self._EXTENSIONS[media_type]}"

    def peek(self, key: str) -> Optional[CacheEntry[PreviewImageArtifact]]:
        newest: Optional[CacheEntry[PreviewImageArtifact]] = None
        for media_type in self._EXTENSIONS:
            path = self._path(key, media_type)
            if not path.exists():
                continue
            fetched_at_ms = int(path.stat().st_mtime * 1000)
            if newest is not None and newest.fetched_at_ms >= fetched_at_ms:
                continue
            artifact = PreviewImageArtifact(content=path.read_bytes(), media_type=media_type, address=key)
            newest = CacheEntry(value=artifact, fetched_at_ms=fetched_at_ms)
        return newest

    def get(self, key: str) -> Optional[CacheEntry[PreviewImageArtifact]]:
        entry = self.peek(key)
        if entry is None or self.is_expired(entry):
            return None
        return entry

    def set(self, key: str, value: PreviewImageArtifact) -> CacheEntry[PreviewImageArtifact]:
        path = self._path(key, value.media_type)
        path.write_bytes(value.content)
        now = self._clock()
        os.utime(path, (now, now))
        for media_type in self._EXTENSIONS:
            if media_type != value.media_type:
                self._path(key, media_type).unlink(missing_ok=True)
        log.debug(f"Stored preview artifact at {path}")
        return CacheEntry(value=value, fetched_at_ms=int(now * 1000))

    def clear(self) -> None:
        for path in self.directory.glob("*"):
            if path.suffix in self._EXTENSIONS.values():
                path.unlink(missing_ok=True)

    def __len__(self) -> int:
        return sum(1 for p in self.directory.glob("*") if p.suffix in self._EXTENSIONS.values())
#END
