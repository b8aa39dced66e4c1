"""Platform user registration sync."""

from mediabuzz.logging_config import get_logger
from mediabuzz.referral.codes import generate_referral_code
from mediabuzz.referral.device import generate_device_fingerprint
from mediabuzz.storage.models import new_record_id, utcnow
from mediabuzz.storage.repo import UserRepository
from mediabuzz.users.models import (
    AccountType,
    PlatformUser,
    RegisterUserRequest,
    UserRole,
    UserStatus,
)

logger = get_logger(__name__)


class UserService:
    """Service for syncing identity-provider users into the platform."""

    def __init__(self, users: UserRepository, admin_email: str):
        self.users = users
        self.admin_email = admin_email.lower()
        self.logger = get_logger(__name__)

    def register(
        self,
        payload: RegisterUserRequest,
        request_ip: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[PlatformUser, bool]:
        """Create or update the user matching ``payload.email`` (case-insensitive).

        Args:
            payload: Registration sync payload
            request_ip: Client IP of the registration request
            user_agent: Client User-Agent

        Returns:
            Tuple of (user, created)
        """
        email_lower = payload.email.lower()
        fingerprint = generate_device_fingerprint(request_ip, user_agent)
        now = utcnow()

        with self.users.editing() as users:
            user = next((u for u in users if u.email.lower() == email_lower), None)
            created = user is None

            if user is None:
                user_id = new_record_id("USR")
                user = PlatformUser(
                    id=user_id,
                    email=payload.email,
                    name=payload.name,
                    account_type=payload.account_type or AccountType.USER,
                    role=UserRole.ADMIN if email_lower == self.admin_email else UserRole.USER,
                    status=UserStatus.ACTIVE if payload.email_verified else UserStatus.PENDING,
                    email_verified=payload.email_verified,
                    referral_code=generate_referral_code(user_id, payload.email),
                    firebase_uid=payload.firebase_uid,
                    last_ip=request_ip,
                    device_fingerprint=fingerprint,
                    created_at=now,
                    updated_at=now,
                )
                users.append(user)
            else:
                user.name = payload.name
                user.account_type = payload.account_type or user.account_type
                user.email_verified = payload.email_verified
                user.firebase_uid = payload.firebase_uid or user.firebase_uid
                user.last_ip = request_ip or user.last_ip
                user.updated_at = now
                if payload.email_verified and user.status == UserStatus.PENDING:
                    user.status = UserStatus.ACTIVE
                if not user.referral_code:
                    user.referral_code = generate_referral_code(user.id, user.email)

        self.logger.info(
            "user_registered" if created else "user_synced",
            user_id=user.id,
            email=user.email,
            status=user.status.value,
        )
        return user, created

    def resolve(self, identifier: str) -> PlatformUser | None:
        """Find a user by database id, identity-provider uid or email."""
        return self.users.resolve(identifier)

    def resolve_user_id(self, identifier: str) -> str:
        """Database id for ``identifier``, or the identifier itself when no user matches."""
        user = self.users.resolve(identifier)
        return user.id if user else identifier

    def ensure_referral_code(self, user: PlatformUser) -> str:
        """Return the user's referral code, generating and saving it once if missing."""
        if user.referral_code:
            return user.referral_code

        code = generate_referral_code(user.id, user.email)

        def _assign(existing: PlatformUser) -> PlatformUser:
            if not existing.referral_code:
                existing.referral_code = code
                existing.updated_at = utcnow()
            return existing

        updated = self.users.update(user.id, _assign)
        self.logger.info("referral_code_created", user_id=user.id, code=updated.referral_code)
        return updated.referral_code

    def list_users(self) -> list[PlatformUser]:
        return self.users.list_all()

    def index_by_id(self) -> dict[str, PlatformUser]:
        """Users keyed by database id and identity-provider uid, for enriching admin listings."""
        index: dict[str, PlatformUser] = {}
        for user in self.users.list_all():
            index[user.id] = user
            if user.firebase_uid:
                index.setdefault(user.firebase_uid, user)
        return index
