"""Repository layer for data access.

Each repository owns one collection of the record store. Mutations run a full
load-modify-save cycle under a per-repository lock so concurrent requests in
this process never overwrite each other's changes. Writers in other processes
can still race (last writer wins).
"""

import threading
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

from mediabuzz.earnings.models import WithdrawRequest, WithdrawStatus
from mediabuzz.errors import NotFoundError
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.models import ReferralRecord
from mediabuzz.sharing.models import SharePost, ShareLink, ShareRecord, ShareVisitor
from mediabuzz.storage.models import RecordModel
from mediabuzz.storage.store import Collections, RecordStore
from mediabuzz.users.models import PlatformUser

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=RecordModel)


class RecordRepository(Generic[ModelT]):
    """Typed access to one collection."""

    collection: str
    model: type[ModelT]
    entity_name: str = "Record"

    def __init__(self, store: RecordStore):
        self.store = store
        self._lock = threading.RLock()

    def list_all(self) -> list[ModelT]:
        """Load every record of the collection."""
        return [self.model.model_validate(r) for r in self.store.load(self.collection)]

    def save_all(self, records: list[ModelT]) -> None:
        """Replace the collection with ``records``."""
        self.store.save(self.collection, [r.to_record() for r in records])

    def filter(self, predicate: Callable[[ModelT], bool]) -> list[ModelT]:
        return [r for r in self.list_all() if predicate(r)]

    def get_by_id(self, record_id: str) -> ModelT | None:
        """Get record by ID."""
        return next((r for r in self.list_all() if r.id == record_id), None)

    def require(self, record_id: str) -> ModelT:
        """Get record by ID or raise NotFoundError."""
        record = self.get_by_id(record_id)
        if record is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return record

    @contextmanager
    def editing(self) -> Iterator[list[ModelT]]:
        """Yield the mutable record list and save it back on normal exit."""
        with self._lock:
            records = self.list_all()
            yield records
            self.save_all(records)

    def add(self, record: ModelT) -> ModelT:
        """Append a record."""
        with self.editing() as records:
            records.append(record)
        logger.debug("record_added", collection=self.collection, record_id=record.id)
        return record

    def update(self, record_id: str, changes: Callable[[ModelT], ModelT]) -> ModelT:
        """Replace one record with ``changes(record)``.

        Raises:
            NotFoundError: If no record has ``record_id``
        """
        with self._lock:
            records = self.list_all()
            for index, record in enumerate(records):
                if record.id == record_id:
                    records[index] = changes(record)
                    self.save_all(records)
                    return records[index]
        raise NotFoundError(f"{self.entity_name} not found")

    def delete(self, record_id: str) -> bool:
        """Delete a record. Returns False when it did not exist."""
        with self._lock:
            records = self.list_all()
            kept = [r for r in records if r.id != record_id]
            if len(kept) == len(records):
                return False
            self.save_all(kept)
        return True


class UserRepository(RecordRepository[PlatformUser]):
    """Repository for platform users."""

    collection = Collections.USERS
    model = PlatformUser
    entity_name = "User"

    def find_by_email(self, email: str) -> PlatformUser | None:
        email_lower = email.strip().lower()
        return next((u for u in self.list_all() if u.email.lower() == email_lower), None)

    def find_by_referral_code(self, code: str) -> list[PlatformUser]:
        """All users owning ``code``, in stored order (codes may collide)."""
        return [u for u in self.list_all() if u.referral_code == code]

    def resolve(self, identifier: str) -> PlatformUser | None:
        """Match a database id, identity-provider uid or email."""
        identifier_lower = identifier.strip().lower()
        for user in self.list_all():
            if (
                user.id == identifier
                or (user.firebase_uid and user.firebase_uid == identifier)
                or user.email.lower() == identifier_lower
            ):
                return user
        return None


class ReferralRepository(RecordRepository[ReferralRecord]):
    """Repository for referral records."""

    collection = Collections.REFERRALS
    model = ReferralRecord
    entity_name = "Referral"

    def for_referrer(self, user_id: str) -> list[ReferralRecord]:
        return self.filter(lambda r: r.referrer_user_id == user_id)


class SharePostRepository(RecordRepository[SharePost]):
    """Repository for share posts."""

    collection = Collections.SHARE_POSTS
    model = SharePost
    entity_name = "Share post"


class ShareLinkRepository(RecordRepository[ShareLink]):
    """Repository for share links (id = share code)."""

    collection = Collections.SHARE_LINKS
    model = ShareLink
    entity_name = "Share link"


class ShareRecordRepository(RecordRepository[ShareRecord]):
    """Repository for share coin grants."""

    collection = Collections.SHARE_RECORDS
    model = ShareRecord
    entity_name = "Share record"

    def for_user(self, user_id: str) -> list[ShareRecord]:
        return self.filter(lambda r: r.user_id == user_id)


class ShareVisitorRepository(RecordRepository[ShareVisitor]):
    """Repository for share link visitors."""

    collection = Collections.SHARE_VISITORS
    model = ShareVisitor
    entity_name = "Share visitor"

    def for_link(self, share_code: str) -> list[ShareVisitor]:
        return self.filter(lambda v: v.share_link == share_code)


class WithdrawRequestRepository(RecordRepository[WithdrawRequest]):
    """Repository for withdraw requests."""

    collection = Collections.WITHDRAW_REQUESTS
    model = WithdrawRequest
    entity_name = "Withdraw request"

    def for_user(self, *user_ids: str) -> list[WithdrawRequest]:
        """Requests filed under any of ``user_ids``."""
        ids = set(user_ids)
        return self.filter(lambda w: w.user_id in ids)

    def has_pending(self, *user_ids: str) -> bool:
        return any(w.status == WithdrawStatus.PENDING for w in self.for_user(*user_ids))


class Repositories:
    """One repository per collection, sharing a record store."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.users = UserRepository(store)
        self.referrals = ReferralRepository(store)
        self.share_posts = SharePostRepository(store)
        self.share_links = ShareLinkRepository(store)
        self.share_records = ShareRecordRepository(store)
        self.share_visitors = ShareVisitorRepository(store)
        self.withdraw_requests = WithdrawRequestRepository(store)
