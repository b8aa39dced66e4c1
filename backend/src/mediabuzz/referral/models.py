"""Referral record models."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from mediabuzz.storage.models import RecordModel, utcnow


class RecordStatus(str, Enum):
    """Review status shared by referral and share records."""
    PENDING = "pending"      # Awaiting admin review
    APPROVED = "approved"    # Counts toward the available balance
    REJECTED = "rejected"    # Counts nowhere


class ReferralRecord(RecordModel):
    """Links a referring user to a referred signup.

    At most one record exists per referred user.
    """

    referrer_user_id: str
    referred_user_id: str
    referral_code: str
    coins_earned: int
    status: RecordStatus = RecordStatus.PENDING

    # Anti-abuse
    device_fingerprint: str | None = None
    flagged: bool = False  # Repeat device within the referrer's chain

    admin_note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
