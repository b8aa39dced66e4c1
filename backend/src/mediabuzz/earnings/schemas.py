"""Request bodies for the withdraw endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mediabuzz.earnings.models import WithdrawStatus


class CreateWithdrawRequest(BaseModel):
    """Withdraw request submitted by a user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    amount_coins: int
    destination: str = Field(..., max_length=64)


class UpdateWithdrawStatusRequest(BaseModel):
    """Admin decision on a withdraw request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: WithdrawStatus
    admin_note: str | None = Field(default=None, max_length=500)
