"""Platform user models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from mediabuzz.storage.models import RecordModel, utcnow


class AccountType(str, Enum):
    """Account types."""
    USER = "user"
    CREATOR = "creator"


class UserRole(str, Enum):
    """User roles."""
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account status."""
    PENDING = "pending"      # Email not verified yet
    ACTIVE = "active"


class PlatformUser(RecordModel):
    """A registered platform user.

    Created on the first registration sync from the identity provider and
    updated on later syncs. Never hard-deleted.
    """

    email: str
    name: str
    account_type: AccountType = AccountType.USER
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.PENDING
    email_verified: bool = False
    referral_code: str | None = None
    firebase_uid: str | None = None

    # Anti-abuse signals captured at registration
    last_ip: str | None = None
    device_fingerprint: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PublicUser(RecordModel):
    """User as returned to the client; anti-abuse signals stay server-side."""

    email: str
    name: str
    account_type: AccountType
    role: UserRole
    status: UserStatus
    email_verified: bool
    referral_code: str | None = None
    firebase_uid: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: PlatformUser) -> "PublicUser":
        return cls.model_validate(user.model_dump(exclude={"last_ip", "device_fingerprint"}))


class RegisterUserRequest(BaseModel):
    """Registration sync payload sent after the identity provider signs a user up."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    firebase_uid: str | None = None
    email_verified: bool = False
    account_type: AccountType | None = None
    referral_code: str | None = Field(default=None, max_length=32)
    share_code: str | None = Field(default=None, max_length=64)


class AdminUsersResponse(BaseModel):
    """Admin user listing."""
    data: list[PlatformUser]
    total: int
