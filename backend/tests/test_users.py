"""Tests for user registration sync."""

from mediabuzz.referral.codes import generate_referral_code
from mediabuzz.referral.device import generate_device_fingerprint
from mediabuzz.users.models import AccountType, RegisterUserRequest, UserRole, UserStatus


def _payload(**overrides) -> RegisterUserRequest:
    data = {"email": "alice@example.com", "name": "Alice"}
    data.update(overrides)
    return RegisterUserRequest(**data)


class TestUserRegistration:
    def test_new_user(self, services):
        user, created = services.users.register(
            _payload(firebaseUid="fb-alice"), request_ip="10.0.0.1", user_agent="UA"
        )

        assert created is True
        assert user.id.startswith("USR")
        assert user.role == UserRole.USER
        assert user.status == UserStatus.PENDING
        assert user.referral_code == generate_referral_code(user.id, user.email)
        assert user.device_fingerprint == generate_device_fingerprint("10.0.0.1", "UA")
        assert services.repos.users.require(user.id).firebase_uid == "fb-alice"

    def test_verified_user_is_active(self, services):
        user, _ = services.users.register(_payload(emailVerified=True))
        assert user.status == UserStatus.ACTIVE

    def test_admin_email_gets_admin_role(self, services):
        user, _ = services.users.register(_payload(email="Admin@FreeMediaBuzz.com", name="Admin"))
        assert user.role == UserRole.ADMIN

    def test_sync_updates_existing_user(self, services):
        first, _ = services.users.register(_payload())
        second, created = services.users.register(
            _payload(email="ALICE@example.com", name="Alice B", emailVerified=True, accountType="creator")
        )

        assert created is False
        assert second.id == first.id
        assert second.name == "Alice B"
        assert second.account_type == AccountType.CREATOR
        assert second.status == UserStatus.ACTIVE
        assert second.referral_code == first.referral_code
        assert len(services.repos.users.list_all()) == 1

    def test_resolve_by_id_uid_or_email(self, services):
        user, _ = services.users.register(_payload(firebaseUid="fb-alice"))

        assert services.users.resolve(user.id).id == user.id
        assert services.users.resolve("fb-alice").id == user.id
        assert services.users.resolve("ALICE@EXAMPLE.COM").id == user.id
        assert services.users.resolve("nobody") is None
        assert services.users.resolve_user_id("nobody") == "nobody"

    def test_ensure_referral_code_backfills(self, services, make_user):
        user = make_user("legacy@example.com")
        assert user.referral_code is None

        code = services.users.ensure_referral_code(user)

        assert code == generate_referral_code(user.id, user.email)
        assert services.repos.users.require(user.id).referral_code == code
