"""
Schema Cache

Time-bounded, in-memory snapshot of the table and column names in the
default schema. The snapshot is refreshed lazily when it is missing or
older than the TTL, and dropped whenever a schema-changing statement
succeeds.

Usage:
    cache = SchemaCache(connector, ttl_seconds=300)
    snapshot = await cache.get_snapshot()
    snapshot.columns_for("users")

    cache.invalidate()  # after CREATE/ALTER/DROP/...
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class CatalogAccessor(Protocol):
    async def list_tables(self) -> list[str]: ...

    async def list_columns(self) -> list[tuple[str, str]]: ...


@dataclass(frozen=True)
class SchemaSnapshot:
    """Tables and columns from a single catalog fetch."""

    tables: tuple[str, ...]
    columns: tuple[tuple[str, str], ...]
    fetched_at: float

    def columns_for(self, table: str) -> list[str]:
        """Column names of ``table`` in catalog order, matched case-insensitively."""
        wanted = table.lower()
        return [column for owner, column in self.columns if owner.lower() == wanted]

    def column_names(self) -> list[str]:
        """Distinct column names across all tables, first occurrence order."""
        return list(dict.fromkeys(column for _, column in self.columns))


class SchemaCache:
    """
    Owns one schema snapshot and the policy for refreshing it.

    Concurrent callers that find the snapshot stale share a single
    refresh. The snapshot is replaced by a single attribute assignment,
    so readers see either the old or the new fetch, never a mix.
    """

    def __init__(
        self,
        catalog: CatalogAccessor,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.catalog = catalog
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: SchemaSnapshot | None = None
        self._generation = 0
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> SchemaSnapshot | None:
        """Current snapshot without triggering a refresh."""
        return self._snapshot

    def is_fresh(self) -> bool:
        snapshot = self._snapshot
        if snapshot is None:
            return False
        return self._clock() - snapshot.fetched_at <= self.ttl_seconds

    async def get_snapshot(self) -> SchemaSnapshot:
        """
        Return the cached snapshot, fetching a new one if missing or expired.

        Raises:
            SchemaError: If the catalog queries fail; the cache is left empty
        """
        if self.is_fresh():
            return self._snapshot

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            if self.is_fresh():
                return self._snapshot

            generation = self._generation
            try:
                tables = await self.catalog.list_tables()
                columns = await self.catalog.list_columns()
            except Exception:
                # Never leave an expired snapshot behind a failed refresh.
                self._snapshot = None
                raise
            snapshot = SchemaSnapshot(
                tables=tuple(tables),
                columns=tuple((table, column) for table, column in columns),
                fetched_at=self._clock(),
            )

            if generation == self._generation:
                self._snapshot = snapshot
            else:
                logger.debug("Schema changed during refresh, not caching fetched snapshot")

            logger.debug(
                f"Schema snapshot refreshed: {len(snapshot.tables)} tables, "
                f"{len(snapshot.columns)} columns"
            )
            return snapshot

    def invalidate(self) -> None:
        """Drop the snapshot so the next read refetches, regardless of TTL."""
        self._snapshot = None
        self._generation += 1
        logger.debug("Schema snapshot invalidated")
