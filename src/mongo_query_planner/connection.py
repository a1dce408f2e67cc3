"""MongoConnectionManager: Motor client lifecycle and collection lookup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from .exceptions import MongoConnectionError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient

    from .builder import QueryBuilder

logger = logging.getLogger(__name__)


class MongoConnectionManager:
    """Own one Motor client and hand out collections and query builders.

    Usage:
        async with MongoConnectionManager(url, database="shop") as connection:
            rows = await connection.collection("orders").where("paid", True).get()
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._client_options: dict[str, Any] = {
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "connectTimeoutMS": connect_timeout_ms,
            **kwargs,
        }
        self._client: AsyncIOMotorClient[Any] | None = None

    async def __aenter__(self) -> MongoConnectionManager:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create the Motor client on first use and reuse it afterwards."""
        if self._client is None:
            self._client = self._create_client()
            logger.debug("Motor client created (database=%s)", self._database)
        return self._client

    def _create_client(self) -> AsyncIOMotorClient[Any]:
        try:
            from motor.motor_asyncio import AsyncIOMotorClient
        except ImportError as e:
            raise MongoConnectionError(
                "motor is required; install with motor>=3.3.0"
            ) from e
        try:
            return AsyncIOMotorClient(self._url, **self._client_options)
        except (PyMongoError, ValueError, TypeError) as e:
            raise MongoConnectionError(f"Cannot create Motor client: {e}") from e

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    @property
    def database_name(self) -> str:
        if not self._database:
            raise MongoConnectionError("Database name must be set on the connection")
        return self._database

    def get_collection(self, name: str, *, database: str | None = None) -> Any:
        """Return the Motor collection ``name`` of ``database``."""
        db = self.client.get_database(database or self.database_name)
        return db.get_collection(name)

    def collection(self, name: str, *, database: str | None = None) -> QueryBuilder:
        """Start a query against collection ``name``."""
        from .builder import QueryBuilder

        database = database or self.database_name
        return QueryBuilder(
            self.get_collection(name, database=database),
            database=database,
            connection=self,
        )

    table = collection

    def close(self) -> None:
        """Close and forget the client; a later connect() opens a new one."""
        client, self._client = self._client, None
        if client is not None:
            client.close()
            logger.debug("Motor client closed")

    async def health_check(self) -> bool:
        """True when connected and the server answers ``ping``."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB health check failed: %s", e)
            return False
        return True
