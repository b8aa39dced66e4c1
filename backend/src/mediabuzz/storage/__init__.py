"""Record storage: document database with JSON file fallback."""

from mediabuzz.storage.db import MongoConnection
from mediabuzz.storage.models import RecordModel, new_record_id, utcnow
from mediabuzz.storage.store import (
    Collections,
    FallbackRecordStore,
    FileRecordStore,
    MongoRecordStore,
    RecordStore,
    build_record_store,
)

__all__ = [
    "Collections",
    "FallbackRecordStore",
    "FileRecordStore",
    "MongoConnection",
    "MongoRecordStore",
    "RecordModel",
    "RecordStore",
    "build_record_store",
    "new_record_id",
    "utcnow",
]
