"""Referral service: codes, referral records and admin review."""

from typing import Any

from mediabuzz.logging_config import get_logger
from mediabuzz.referral.codes import normalize_referral_code
from mediabuzz.referral.models import RecordStatus, ReferralRecord
from mediabuzz.storage.models import new_record_id
from mediabuzz.storage.repo import Repositories
from mediabuzz.users.models import PlatformUser
from mediabuzz.users.service import UserService

logger = get_logger(__name__)


class ReferralService:
    """Service for managing referral codes and referral records."""

    def __init__(self, repos: Repositories, users: UserService):
        self.repos = repos
        self.users = users
        self.logger = get_logger(__name__)

    def get_referral_info(self, user: PlatformUser) -> dict[str, str]:
        """Referral code and relative signup link (the client prepends its origin)."""
        code = self.users.ensure_referral_code(user)
        return {
            "referralCode": code,
            "referralLink": f"/signup?ref={code}",
        }

    def find_referrer(self, code: str | None) -> PlatformUser | None:
        """Owner of a referral code.

        Generated codes can collide; the first user in stored order wins and
        the collision is logged.
        """
        code = normalize_referral_code(code)
        if not code:
            return None

        owners = self.repos.users.find_by_referral_code(code)
        if not owners:
            return None
        if len(owners) > 1:
            self.logger.warning(
                "referral_code_collision",
                code=code,
                owner_ids=[u.id for u in owners],
                chosen=owners[0].id,
            )
        return owners[0]

    def create_referral(
        self,
        referrer: PlatformUser,
        referred_user_id: str,
        referral_code: str,
        coins: int,
        fingerprint: str | None,
        flagged: bool,
    ) -> ReferralRecord | None:
        """Create a pending referral record.

        Returns None when the referred user already has a referral record.
        """
        with self.repos.referrals.editing() as referrals:
            if any(r.referred_user_id == referred_user_id for r in referrals):
                self.logger.info(
                    "referral_duplicate_ignored",
                    referrer_id=referrer.id,
                    referred_id=referred_user_id,
                )
                return None

            record = ReferralRecord(
                id=new_record_id("REF"),
                referrer_user_id=referrer.id,
                referred_user_id=referred_user_id,
                referral_code=referral_code,
                coins_earned=coins,
                status=RecordStatus.PENDING,
                device_fingerprint=fingerprint,
                flagged=flagged,
                admin_note="Repeat device fingerprint in referral chain" if flagged else None,
            )
            referrals.append(record)

        self.logger.info(
            "referral_created",
            referral_id=record.id,
            referrer_id=referrer.id,
            referred_id=referred_user_id,
            coins=coins,
            flagged=flagged,
        )
        return record

    def referral_history(self, user_id: str) -> list[ReferralRecord]:
        """Referrals made by ``user_id``, newest first."""
        records = self.repos.referrals.for_referrer(user_id)
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def list_referrals_enriched(self) -> list[dict[str, Any]]:
        """All referrals with referrer and referred user names for the admin view."""
        users = self.users.index_by_id()
        enriched = []
        for referral in self.repos.referrals.list_all():
            referrer = users.get(referral.referrer_user_id)
            referred = users.get(referral.referred_user_id)
            enriched.append({
                **referral.model_dump(by_alias=True, mode="json"),
                "referrerName": referrer.name if referrer else "Unknown",
                "referrerEmail": referrer.email if referrer else "Unknown",
                "referredName": referred.name if referred else "Unknown",
                "referredEmail": referred.email if referred else "Unknown",
            })
        return enriched

    def update_status(
        self,
        referral_id: str,
        status: RecordStatus,
        admin_note: str | None = None,
    ) -> ReferralRecord:
        """Admin approval or rejection of a referral. A missing note keeps the existing one."""

        def _review(record: ReferralRecord) -> ReferralRecord:
            record.status = status
            if admin_note is not None:
                record.admin_note = admin_note
            return record

        record = self.repos.referrals.update(referral_id, _review)
        self.logger.info("referral_reviewed", referral_id=referral_id, status=status.value)
        return record
