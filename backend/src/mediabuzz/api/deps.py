"""Service wiring and request dependencies.

Services are built once per application from a record store and stored on
``app.state.services``; routes receive them through ``Depends(get_services)``.
"""

import secrets

from fastapi import Header, HTTPException, Request, status

from mediabuzz.earnings.ledger import EarningsLedger
from mediabuzz.earnings.withdraw import WithdrawService
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.attribution import SignupAttributionProcessor
from mediabuzz.referral.service import ReferralService
from mediabuzz.settings import Settings
from mediabuzz.sharing.service import ShareService
from mediabuzz.storage.repo import Repositories
from mediabuzz.storage.store import RecordStore
from mediabuzz.users.models import PlatformUser
from mediabuzz.users.service import UserService

logger = get_logger(__name__)


class ServiceContainer:
    """Repositories and services sharing one record store."""

    def __init__(self, settings: Settings, store: RecordStore):
        self.settings = settings
        self.store = store
        self.repos = Repositories(store)

        self.users = UserService(self.repos.users, settings.admin_email)
        self.referrals = ReferralService(self.repos, self.users)
        self.shares = ShareService(
            self.repos,
            public_base_url=settings.public_base_url,
            min_coins=settings.referral_min_coins,
            max_coins=settings.referral_max_coins,
        )
        self.attribution = SignupAttributionProcessor(
            self.repos,
            self.referrals,
            self.shares,
            min_coins=settings.referral_min_coins,
            max_coins=settings.referral_max_coins,
        )
        self.ledger = EarningsLedger(self.repos)
        self.withdrawals = WithdrawService(
            self.repos,
            self.ledger,
            min_withdraw_coins=settings.min_withdraw_coins,
            coins_per_payout_unit=settings.coins_per_payout_unit,
            payout_unit_amount=settings.payout_unit_amount,
        )

    def user_ids(self, identifier: str) -> tuple[str, list[str]]:
        """Database id for ``identifier`` plus the other ids its records may carry.

        Older records can reference a user by identity-provider uid instead of
        the database id.
        """
        user = self.users.resolve(identifier)
        if user is None:
            return identifier, []
        aliases = [i for i in (identifier, user.firebase_uid) if i and i != user.id]
        return user.id, aliases


def get_services(request: Request) -> ServiceContainer:
    """Services of the running application."""
    return request.app.state.services


def require_user(user_id: str, request: Request) -> PlatformUser:
    """Resolve the ``user_id`` path parameter to a user.

    Raises:
        HTTPException: 404 if no user matches
    """
    user = get_services(request).users.resolve(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def require_admin(
    request: Request,
    x_admin_key: str | None = Header(default=None),
) -> None:
    """Require the admin API key.

    Without a configured key the admin surface is open outside production
    and closed in production.

    Raises:
        HTTPException: 403 if the key is missing or wrong
    """
    settings = get_services(request).settings
    expected = settings.admin_api_key

    if not expected:
        if settings.is_production:
            logger.warning("admin_access_denied", reason="admin_key_not_configured")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required",
            )
        return

    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        logger.warning("admin_access_denied", reason="invalid_admin_key", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
