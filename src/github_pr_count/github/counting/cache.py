"""Per-repository count cache for concurrent scans.

The counter depends only on the CountCache protocol, so a bounded or
external store can replace the in-memory implementation.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol

from github_pr_count.logging import get_logger
from github_pr_count.schemas import CacheRecord, RepositoryRef

logger = get_logger(__name__)


class CountCache(Protocol):
    """Storage for the last observed pagination state of each repository."""

    def get(self, repo: RepositoryRef) -> CacheRecord | None:
        """Return the record for a repository, or None if never scanned."""
        ...

    def upsert(
        self,
        repo: RepositoryRef,
        last_page: int,
        num_records_in_page: int,
        record_count: int,
    ) -> CacheRecord:
        """Create or update the record for a repository."""
        ...


class InMemoryCountCache:
    """Process-lifetime CountCache backed by a dict.

    Unbounded, no eviction. ``get`` hands out a copy so a scan in progress
    keeps a consistent view; ``upsert`` is serialised per repository and
    updates the stored record in place.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], CacheRecord] = {}
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: tuple[str, str]) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get(self, repo: RepositoryRef) -> CacheRecord | None:
        """Return a copy of the record for a repository."""
        record = self._records.get(repo.key)
        return replace(record) if record is not None else None

    def upsert(
        self,
        repo: RepositoryRef,
        last_page: int,
        num_records_in_page: int,
        record_count: int,
    ) -> CacheRecord:
        """Create or update the record for a repository.

        Args:
            repo: Repository the record belongs to
            last_page: Number of pages observed
            num_records_in_page: Item count of the final page
            record_count: Total pull requests counted

        Returns:
            Copy of the stored record
        """
        with self._lock_for(repo.key):
            record = self._records.get(repo.key)
            if record is None:
                record = CacheRecord(owner=repo.owner, repo=repo.repo)
                self._records[repo.key] = record

            record.last_page = last_page
            record.num_records_in_page = num_records_in_page
            record.record_count = record_count

            logger.debug(
                "Cache updated for {}: last_page={}, num_records_in_page={}, record_count={}",
                repo.full_name,
                last_page,
                num_records_in_page,
                record_count,
            )
            return replace(record)

    def clear(self) -> None:
        """Drop every record."""
        with self._locks_guard:
            self._records.clear()
            self._locks.clear()

    def __len__(self) -> int:
        return len(self._records)


_default_cache = InMemoryCountCache()


def get_default_cache() -> InMemoryCountCache:
    """Get the process-wide cache shared by the CLI and HTTP app."""
    return _default_cache
