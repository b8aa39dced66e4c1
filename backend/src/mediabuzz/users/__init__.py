"""Platform users synced from the identity provider."""

from mediabuzz.users.models import AccountType, PlatformUser, PublicUser, UserRole, UserStatus

__all__ = ["AccountType", "PlatformUser", "PublicUser", "UserRole", "UserStatus"]
