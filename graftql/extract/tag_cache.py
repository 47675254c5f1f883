"""Content-addressed cache for extracted tags.

Extracting templates from a file is pure in the file's contents, so the
result is memoized under ``<content hash><validate-names bit>``.  Two files
with identical contents share an entry, and options other than
``validate_names`` never force recomputation.

The cache is constructed once per process and passed to every caller.  Its
``version`` namespaces the on-disk store: bumping it invalidates every
persisted entry without manual clearing.  Entries are never evicted.

Concurrent requests for the same key are single-flighted: the first caller
extracts, later callers wait for its result.  Async callers can share the
cache through ``asyncio.to_thread``.
"""
from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

import structlog

from graftql.errors import PreconditionViolation
from graftql.extract.tags import (
    ExtractedTag,
    SourceFile,
    TagFinder,
    TagFinderOptions,
    content_hash,
)

logger = structlog.get_logger(__name__)

DEFAULT_TRIGGER = "graphql"


@dataclass
class CacheStats:
    """Counters for cache behaviour.

    Attributes:
        hits: Lookups answered from memory.
        misses: Lookups that waited on, loaded, or ran an extraction.
        extractions: Calls made to the underlying tag finder.
    """

    hits: int = 0
    misses: int = 0
    extractions: int = 0


def cache_key(digest: str, options: TagFinderOptions) -> str:
    """Compose the cache key for contents hashing to ``digest`` under ``options``."""
    return f"{digest}{'1' if options.validate_names else '0'}"


class TagCache:
    """Memoizes a :data:`~graftql.extract.tags.TagFinder` by file contents.

    Args:
        tag_finder: The extraction function to memoize.
        name: Cache name, used for the store directory.
        version: Format tag; entries written under another version are ignored.
        store_dir: Optional directory for a persisted store shared across runs.
        trigger: Substring every file handed to the cache must contain.
    """

    def __init__(
        self,
        tag_finder: TagFinder,
        *,
        name: str = "graftql.tags",
        version: str = "v1",
        store_dir: Path | str | None = None,
        trigger: str = DEFAULT_TRIGGER,
    ) -> None:
        self._tag_finder = tag_finder
        self._name = name
        self._version = version
        self._store = Path(store_dir) / f"{name}-{version}" if store_dir else None
        self._trigger = trigger
        self._entries: dict[str, tuple[ExtractedTag, ...]] = {}
        self._in_flight: dict[str, Future[tuple[ExtractedTag, ...]]] = {}
        self._lock = threading.Lock()
        self.stats = CacheStats()

    @property
    def version(self) -> str:
        return self._version

    @property
    def trigger(self) -> str:
        return self._trigger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_or_compute(
        self,
        file: SourceFile,
        text: str,
        options: TagFinderOptions,
        base_dir: Path | str | None = None,
    ) -> tuple[ExtractedTag, ...]:
        """Return the tags of ``file``, extracting at most once per key.

        Args:
            file: Snapshot of the file ``text`` was read from.
            text: The file contents.
            options: Finder options; only ``validate_names`` affects the key.
            base_dir: Source root, joined with ``file.rel_path`` for the path
                handed to the finder.

        Returns:
            The extracted tags, in source order.

        Raises:
            PreconditionViolation: If the file does not exist or its text does
                not contain the trigger substring.
            ParseError: Propagated from the tag finder; failures are not cached.
        """
        if not file.exists:
            raise PreconditionViolation(
                f"TagCache: called with non-existent file '{file.rel_path}'."
            )
        if self._trigger not in text:
            raise PreconditionViolation(
                f"TagCache: files should be filtered before extraction, got "
                f"unfiltered file '{file.rel_path}'."
            )
        path = str(Path(base_dir) / file.rel_path) if base_dir else file.rel_path
        digest = content_hash(text)
        if file.hash != digest:
            logger.debug("tag_cache_stale_snapshot", path=path, snapshot_hash=file.hash)
        key = cache_key(digest, options)
        return self._single_flight(key, lambda: self._tag_finder(text, path, options))

    def clear_memory(self) -> None:
        """Drop in-memory entries; the persisted store is kept."""
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------
    # Single flight
    # ------------------------------------------------------------------

    def _single_flight(
        self, key: str, compute: Callable[[], list[ExtractedTag]]
    ) -> tuple[ExtractedTag, ...]:
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.stats.hits += 1
                return cached
            future = self._in_flight.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._in_flight[key] = future
            self.stats.misses += 1

        if not owner:
            return future.result()

        try:
            value = self._load(key)
            if value is None:
                logger.debug("tag_cache_miss", cache=self._name, key=key)
                with self._lock:
                    self.stats.extractions += 1
                value = tuple(compute())
                self._save(key, value)
            else:
                logger.debug("tag_cache_store_hit", cache=self._name, key=key)
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._entries[key] = value
            self._in_flight.pop(key, None)
        future.set_result(value)
        return value

    # ------------------------------------------------------------------
    # Persisted store
    # ------------------------------------------------------------------

    def _entry_path(self, key: str) -> Path | None:
        return self._store / f"{key}.json" if self._store else None

    def _load(self, key: str) -> tuple[ExtractedTag, ...] | None:
        path = self._entry_path(key)
        if path is None or not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict) or data.get("version") != self._version:
                return None
            return tuple(ExtractedTag.model_validate(tag) for tag in data["tags"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("tag_cache_entry_unreadable", path=str(path), error=str(exc))
            return None

    def _save(self, key: str, value: tuple[ExtractedTag, ...]) -> None:
        path = self._entry_path(key)
        if path is None:
            return
        payload = {
            "version": self._version,
            "tags": [tag.model_dump() for tag in value],
        }
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            logger.warning("tag_cache_persist_failed", path=str(path), error=str(exc))
