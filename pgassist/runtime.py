"""Process-wide wiring of the connector, schema cache and error enhancer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pgassist.config import QuerySettings, Settings, get_settings
from pgassist.connectors.base import BaseConnector
from pgassist.connectors.postgres import create_connector
from pgassist.core.enhancer import ErrorEnhancer
from pgassist.core.schema_cache import SchemaCache

logger = logging.getLogger(__name__)


@dataclass
class AssistRuntime:
    """Everything a tool handler needs to serve one request."""

    connector: BaseConnector
    schema_cache: SchemaCache
    enhancer: ErrorEnhancer
    query: QuerySettings = field(default_factory=QuerySettings)

    @classmethod
    def create(
        cls,
        connector: BaseConnector,
        ttl_seconds: float = 300.0,
        query: QuerySettings | None = None,
    ) -> "AssistRuntime":
        schema_cache = SchemaCache(connector, ttl_seconds=ttl_seconds)
        return cls(
            connector=connector,
            schema_cache=schema_cache,
            enhancer=ErrorEnhancer(schema_cache),
            query=query or QuerySettings(),
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AssistRuntime":
        settings = settings or get_settings()
        return cls.create(
            create_connector(settings.database),
            ttl_seconds=settings.schema_cache.ttl_seconds,
            query=settings.query,
        )

    async def start(self) -> None:
        await self.connector.connect()
        logger.info("Runtime started")

    async def close(self) -> None:
        self.schema_cache.invalidate()
        await self.connector.close()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
