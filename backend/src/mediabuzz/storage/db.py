"""Document database connection management."""

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from mediabuzz.logging_config import get_logger
from mediabuzz.settings import Settings

logger = get_logger(__name__)


class MongoConnection:
    """Lazily connects to the document database, at most once per instance.

    The first call to ``connect`` pings the server; the outcome (a database
    handle or ``None``) is cached so later calls never retry.
    """

    def __init__(
        self,
        uri: str | None,
        database_name: str,
        connect_timeout_ms: int = 5000,
    ):
        self.uri = uri
        self.database_name = database_name
        self.connect_timeout_ms = connect_timeout_ms
        self._client: MongoClient | None = None
        self._database: Database | None = None
        self._probed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoConnection":
        return cls(
            uri=settings.mongodb_uri,
            database_name=settings.mongodb_database,
            connect_timeout_ms=settings.mongodb_connect_timeout_ms,
        )

    def connect(self) -> Database | None:
        """Return the database handle, or None when it is unreachable."""
        if self._probed:
            return self._database
        self._probed = True

        if not self.uri:
            logger.info("mongodb_not_configured")
            return None

        try:
            client = MongoClient(
                self.uri.strip().strip("\"'"),
                server_api=ServerApi("1"),
                serverSelectionTimeoutMS=self.connect_timeout_ms,
                connectTimeoutMS=self.connect_timeout_ms,
            )
            client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("mongodb_unavailable", error=str(e))
            return None

        self._client = client
        self._database = client[self.database_name]
        logger.info("mongodb_connected", database=self.database_name)
        return self._database

    @property
    def is_available(self) -> bool:
        return self.connect() is not None

    def close(self) -> None:
        """Close the client connection if one was opened."""
        if self._client is not None:
            self._client.close()
            logger.info("mongodb_connection_closed")
        self._client = None
        self._database = None
        self._probed = False
