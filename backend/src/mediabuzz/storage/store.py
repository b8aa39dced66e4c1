"""Record stores: uniform load/save of named collections.

Two backends implement the same contract. ``MongoRecordStore`` keeps each
collection in a document database, ``FileRecordStore`` keeps it as one JSON
array file. ``save`` always replaces the whole collection.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pymongo.database import Database
from pymongo.errors import PyMongoError

from mediabuzz.errors import StorageUnavailableError
from mediabuzz.logging_config import get_logger
from mediabuzz.settings import Settings
from mediabuzz.storage.db import MongoConnection

logger = get_logger(__name__)

Record = dict[str, Any]


class Collections:
    """Collection names."""

    USERS = "users"
    REFERRALS = "referrals"
    SHARE_POSTS = "share_posts"
    SHARE_LINKS = "share_links"
    SHARE_RECORDS = "share_records"
    SHARE_VISITORS = "share_visitors"
    WITHDRAW_REQUESTS = "withdraw_requests"


# File names used in file mode, one JSON array per collection
COLLECTION_FILES = {
    Collections.USERS: "users-database.json",
    Collections.REFERRALS: "referral-database.json",
    Collections.SHARE_POSTS: "share-posts-database.json",
    Collections.SHARE_LINKS: "share-links-database.json",
    Collections.SHARE_RECORDS: "share-records-database.json",
    Collections.SHARE_VISITORS: "share-visitors-database.json",
    Collections.WITHDRAW_REQUESTS: "withdraw-requests-database.json",
}


class RecordStore(ABC):
    """Load and save whole collections of plain dict records."""

    @abstractmethod
    def load(self, collection: str) -> list[Record]:
        """Return every record of the collection."""

    @abstractmethod
    def save(self, collection: str, records: list[Record]) -> None:
        """Replace the collection with ``records``."""


class FileRecordStore(RecordStore):
    """JSON files on local disk, one per collection."""

    backend = "file"

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def path_for(self, collection: str) -> Path:
        file_name = COLLECTION_FILES.get(collection, f"{collection}-database.json")
        return self.data_dir / file_name

    def load(self, collection: str) -> list[Record]:
        path = self.path_for(collection)

        # Reads never write; the file appears with the first save
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug("collection_file_missing", collection=collection, path=str(path))
            return []
        except json.JSONDecodeError as e:
            logger.error("collection_file_corrupt", collection=collection, path=str(path))
            raise StorageUnavailableError(f"Collection file {path.name} is not valid JSON") from e

        if not isinstance(data, list):
            raise StorageUnavailableError(f"Collection file {path.name} does not hold an array")
        return data

    def save(self, collection: str, records: list[Record]) -> None:
        path = self.path_for(collection)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # Write next to the target then rename so readers never see half a file
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("collection_saved", backend=self.backend, collection=collection, count=len(records))


class MongoRecordStore(RecordStore):
    """Collections in a document database."""

    backend = "mongodb"

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _to_record(document: Record) -> Record:
        record = dict(document)
        object_id = record.pop("_id", None)
        if "id" not in record and object_id is not None:
            record["id"] = str(object_id)
        return record

    def load(self, collection: str) -> list[Record]:
        try:
            documents = list(self.database[collection].find())
        except PyMongoError as e:
            raise StorageUnavailableError(f"Failed to load {collection}: {e}") from e
        return [self._to_record(doc) for doc in documents]

    def save(self, collection: str, records: list[Record]) -> None:
        # insert_many adds _id to the documents it is given, so hand it copies
        documents = [dict(record) for record in records]
        try:
            self.database[collection].delete_many({})
            if documents:
                self.database[collection].insert_many(documents)
        except PyMongoError as e:
            raise StorageUnavailableError(f"Failed to save {collection}: {e}") from e

        logger.debug("collection_saved", backend=self.backend, collection=collection, count=len(records))


class FallbackRecordStore(RecordStore):
    """Serve each call from ``primary``, falling back to ``fallback`` when it is unavailable."""

    def __init__(self, primary: RecordStore, fallback: RecordStore):
        self.primary = primary
        self.fallback = fallback

    @property
    def backend(self) -> str:
        return f"{getattr(self.primary, 'backend', 'primary')}+{getattr(self.fallback, 'backend', 'fallback')}"

    def load(self, collection: str) -> list[Record]:
        try:
            return self.primary.load(collection)
        except StorageUnavailableError as e:
            logger.warning("primary_store_unavailable", operation="load", collection=collection, error=e.message)
        return self._from_fallback(self.fallback.load, collection)

    def save(self, collection: str, records: list[Record]) -> None:
        try:
            self.primary.save(collection, records)
            return
        except StorageUnavailableError as e:
            logger.warning("primary_store_unavailable", operation="save", collection=collection, error=e.message)
        self._from_fallback(self.fallback.save, collection, records)

    @staticmethod
    def _from_fallback(operation, *args):
        try:
            return operation(*args)
        except StorageUnavailableError:
            raise
        except OSError as e:
            logger.error("fallback_store_failed", collection=args[0], error=str(e))
            raise StorageUnavailableError(f"No storage backend available for {args[0]}") from e


def build_record_store(settings: Settings, connection: MongoConnection | None = None) -> RecordStore:
    """Pick the storage backend with a one-time capability probe.

    Args:
        settings: Application settings
        connection: Optional pre-built connection (defaults to one from settings)

    Returns:
        A document-database store chained to the file store when the database
        answers, otherwise the file store alone
    """
    file_store = FileRecordStore(settings.data_dir)
    connection = connection or MongoConnection.from_settings(settings)

    database = connection.connect()
    if database is None:
        logger.info("record_store_selected", backend=file_store.backend, data_dir=str(settings.data_dir))
        return file_store

    store = FallbackRecordStore(MongoRecordStore(database), file_store)
    logger.info("record_store_selected", backend=store.backend)
    return store
