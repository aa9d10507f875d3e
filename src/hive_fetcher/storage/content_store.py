"""asyncpg connection pool for the HAF SQL content store."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg
import structlog

from ..config import Settings

logger = structlog.get_logger()


class ContentStore:
    """Owns the connection pool to the content store.

    Created by the application's composition root, started on startup and
    drained on shutdown. Connections are only handed out through
    `acquire()`, which always returns them to the pool.
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        ssl: bool = False,
        connect_timeout: float = 10,
        idle_timeout: float = 30,
        min_size: int = 0,
        max_size: int = 10,
    ):
        """Initialize content store.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            ssl: Whether to negotiate SSL
            connect_timeout: Seconds to wait when opening a connection
            idle_timeout: Seconds before an idle pooled connection is closed
            min_size: Connections opened when the pool is created
            max_size: Maximum pooled connections
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.ssl = ssl
        self.connect_timeout = connect_timeout
        self.idle_timeout = idle_timeout
        self.min_size = min_size
        self.max_size = max_size
        self._pool: asyncpg.Pool | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentStore":
        """Create a store from application settings."""
        return cls(
            host=settings.db_host,
            port=settings.db_port,
            database=settings.db_name,
            user=settings.db_user,
            password=settings.db_password,
            ssl=settings.db_ssl,
            connect_timeout=settings.db_connect_timeout_seconds,
            idle_timeout=settings.db_idle_timeout_seconds,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    async def start(self) -> None:
        """Create the connection pool.

        With the default `min_size` of 0 connections are opened lazily, so an
        unreachable node does not prevent startup; `check_connection()`
        reports it instead.
        """
        async with self._lock:
            if self._pool is not None:
                return

            logger.info("starting_pool", host=self.host, database=self.database)
            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.user,
                password=self.password,
                ssl=self.ssl,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.connect_timeout,
                max_inactive_connection_lifetime=self.idle_timeout,
            )
            logger.info("pool_started")

    async def stop(self) -> None:
        """Drain and close the connection pool."""
        async with self._lock:
            if self._pool:
                logger.info("stopping_pool")
                await self._pool.close()
                self._pool = None
                logger.info("pool_stopped")

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[asyncpg.Connection, None]:
        """Check a connection out of the pool.

        Yields:
            Connection that is released when the block exits, on success or error
        """
        if self._pool is None:
            await self.start()

        async with self._pool.acquire() as connection:
            yield connection

    async def check_connection(self) -> bool:
        """Run `SELECT 1` and report whether the store is reachable."""
        try:
            async with self.acquire() as connection:
                await connection.fetchval("SELECT 1")
        except Exception as e:
            logger.warning("database_unreachable", host=self.host, error=str(e))
            return False

        logger.info("database_connected", host=self.host)
        return True

    async def __aenter__(self) -> "ContentStore":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
