"""Share post, share link, share record and visitor models."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from mediabuzz.referral.models import RecordStatus
from mediabuzz.storage.models import RecordModel, utcnow

# Pseudo share link stored on coin grants made by an admin
ADMIN_GRANT_LINK = "admin-grant"


class ShareType(str, Enum):
    """What a share link (and the coins it earns) came from."""
    REFERRAL = "referral"
    SHARE_LINK = "share_link"    # Free-form link, random coin amount
    ADMIN_POST = "admin_post"    # Promotional post, fixed coin value


class SharePostStatus(str, Enum):
    """Share post visibility."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class SharePost(RecordModel):
    """Admin-defined promotional post users can share for coins."""

    title: str
    url: str
    coin_value: int
    status: SharePostStatus = SharePostStatus.ACTIVE

    # Media / pop-up display
    image_url: str | None = None
    video_url: str | None = None
    show_as_popup: bool = False
    show_delay: int = 2000  # ms before the pop-up shows
    close_after: int | None = None  # ms before auto-close
    max_displays: int | None = None  # per visitor

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_popup_candidate(self) -> bool:
        return (
            self.status == SharePostStatus.ACTIVE
            and self.show_as_popup
            and bool(self.image_url or self.video_url)
        )


class ShareLink(RecordModel):
    """A trackable link created by a user; ``id`` is the share code."""

    user_id: str
    share_type: ShareType
    share_post_id: str | None = None
    share_link: str  # What the user shared
    registration_count: int = 0  # Confirmed conversions only
    created_at: datetime = Field(default_factory=utcnow)


class ShareRecord(RecordModel):
    """One share-driven coin grant.

    ``coins_earned`` never changes after creation; corrections are new records.
    """

    user_id: str
    share_type: ShareType
    share_post_id: str | None = None
    share_link: str
    coins_earned: int
    registration_count: int = 0
    status: RecordStatus = RecordStatus.PENDING
    flagged: bool = False
    admin_note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class ShareVisitor(RecordModel):
    """One unique visit to a share link, keyed by (share_link, visitor_fingerprint)."""

    share_link: str  # Share code
    visitor_fingerprint: str
    visitor_user_agent: str | None = None
    converted_to_user_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
