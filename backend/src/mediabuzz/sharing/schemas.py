"""Request and response bodies for the share endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediabuzz.referral.models import RecordStatus
from mediabuzz.sharing.models import SharePostStatus, ShareRecord, ShareType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSharePostRequest(_CamelModel):
    """Create a promotional share post."""
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    coin_value: int = Field(..., gt=0)
    status: SharePostStatus = SharePostStatus.ACTIVE
    image_url: str | None = None
    video_url: str | None = None
    show_as_popup: bool = False
    show_delay: int | None = Field(default=None, ge=0)
    close_after: int | None = Field(default=None, ge=0)
    max_displays: int | None = Field(default=None, ge=0)


class UpdateSharePostRequest(_CamelModel):
    """Partial update of a share post."""
    title: str | None = Field(default=None, min_length=1, max_length=200)
    url: str | None = None
    coin_value: int | None = Field(default=None, gt=0)
    status: SharePostStatus | None = None
    image_url: str | None = None
    video_url: str | None = None
    show_as_popup: bool | None = None
    show_delay: int | None = Field(default=None, ge=0)
    close_after: int | None = Field(default=None, ge=0)
    max_displays: int | None = Field(default=None, ge=0)


class ShareLinkRequest(_CamelModel):
    """Create a trackable share link."""
    user_id: str = Field(..., min_length=1)
    share_type: ShareType
    share_link: str = Field(..., min_length=1)
    share_post_id: str | None = None


class ShareLinkResponse(_CamelModel):
    share_url: str
    share_code: str
    message: str = "Share link created successfully"


class TrackVisitRequest(_CamelModel):
    share_code: str = Field(..., min_length=1)


class UpdateRecordStatusRequest(_CamelModel):
    """Admin review of a referral or share record."""
    status: RecordStatus
    admin_note: str | None = Field(default=None, max_length=500)


class AdminGrantRequest(_CamelModel):
    """Admin coin grant to a user identified by email."""
    email: str = Field(..., min_length=3)
    coins: int = Field(..., gt=0)
    note: str | None = Field(default=None, max_length=500)


class EnrichedShareRecord(ShareRecord):
    """Share record with the beneficiary's name and email for admin views."""
    user_name: str = "Unknown"
    user_email: str = "Unknown"
