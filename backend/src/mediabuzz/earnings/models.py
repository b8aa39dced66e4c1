"""Withdraw request and earnings models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediabuzz.storage.models import RecordModel, utcnow


class WithdrawStatus(str, Enum):
    """Withdraw request lifecycle: pending -> approved | rejected."""
    PENDING = "pending"
    APPROVED = "approved"    # Terminal, coins spent
    REJECTED = "rejected"    # Terminal, coins return to the available pool


class WithdrawRequest(RecordModel):
    """A request to pay out earned coins."""

    user_id: str
    amount_coins: int
    payout_amount: float  # BDT
    destination: str  # bKash number
    status: WithdrawStatus = WithdrawStatus.PENDING
    admin_note: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    processed_at: datetime | None = None


class UserEarnings(BaseModel):
    """Balance view derived from referral, share and withdraw records. Never stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_coins: int = 0
    referral_coins: int = 0
    share_coins: int = 0
    admin_post_share_coins: int = 0
    random_share_coins: int = 0
    pending_coins: int = 0
    pending_withdraw: int = 0
    approved_withdraw: int = 0
    available_coins: int = 0
