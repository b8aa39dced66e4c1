"""Signup attribution: credit referrers and share link owners for new users."""

import random
from dataclasses import dataclass, field

from mediabuzz.errors import NotFoundError
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.codes import normalize_referral_code
from mediabuzz.referral.device import generate_device_fingerprint, short_device_id
from mediabuzz.referral.models import ReferralRecord
from mediabuzz.referral.service import ReferralService
from mediabuzz.sharing.models import ShareRecord
from mediabuzz.sharing.service import ShareService
from mediabuzz.storage.repo import Repositories

logger = get_logger(__name__)


@dataclass
class AttributionResult:
    """What a signup attribution produced."""
    referral: ReferralRecord | None = None
    share_record: ShareRecord | None = None
    skipped: list[str] = field(default_factory=list)


class SignupAttributionProcessor:
    """Resolves referral and share codes from a registration and credits the originating users.

    Attribution is a side effect of registration: ``run`` never raises, and
    each signup is attempted once with no retry.
    """

    def __init__(
        self,
        repos: Repositories,
        referrals: ReferralService,
        shares: ShareService,
        min_coins: int = 5,
        max_coins: int = 100,
        rng: random.Random | None = None,
    ):
        self.repos = repos
        self.referrals = referrals
        self.shares = shares
        self.min_coins = min_coins
        self.max_coins = max_coins
        self.rng = rng or random.SystemRandom()
        self.logger = get_logger(__name__)

    def run(
        self,
        new_user_id: str,
        email: str,
        referral_code: str | None = None,
        share_code: str | None = None,
        request_ip: str | None = None,
        user_agent: str | None = None,
    ) -> AttributionResult | None:
        """Background entry point: process the signup, log and swallow any failure."""
        try:
            return self.process_signup(
                new_user_id,
                email,
                referral_code=referral_code,
                share_code=share_code,
                request_ip=request_ip,
                user_agent=user_agent,
            )
        except Exception:
            self.logger.exception(
                "signup_attribution_failed",
                user_id=new_user_id,
                referral_code=referral_code,
                share_code=share_code,
            )
            return None

    def process_signup(
        self,
        new_user_id: str,
        email: str,
        referral_code: str | None = None,
        share_code: str | None = None,
        request_ip: str | None = None,
        user_agent: str | None = None,
    ) -> AttributionResult:
        """Attribute a signup to a referrer and/or a share link.

        Args:
            new_user_id: Database id of the newly registered user
            email: New user's email
            referral_code: Optional referral code from the signup URL
            share_code: Optional share code from the signup URL
            request_ip: Client IP of the registration
            user_agent: Client User-Agent of the registration

        Returns:
            Records created and reasons for anything skipped
        """
        result = AttributionResult()
        fingerprint = generate_device_fingerprint(request_ip, user_agent)

        self.logger.info(
            "signup_attribution_started",
            user_id=new_user_id,
            referral_code=referral_code,
            share_code=share_code,
            device=short_device_id(fingerprint),
        )

        code = normalize_referral_code(referral_code)
        if code:
            result.referral = self._attribute_referral(new_user_id, email, code, fingerprint, result)

        if share_code:
            result.share_record = self._attribute_share(new_user_id, share_code.strip(), fingerprint, result)

        return result

    def _attribute_referral(
        self,
        new_user_id: str,
        email: str,
        code: str,
        fingerprint: str,
        result: AttributionResult,
    ) -> ReferralRecord | None:
        referrer = self.referrals.find_referrer(code)
        if referrer is None:
            self.logger.info("referrer_not_found", referral_code=code)
            result.skipped.append("referrer_not_found")
            return None

        if referrer.id == new_user_id or referrer.email.lower() == email.lower():
            self.logger.info("self_referral_ignored", user_id=new_user_id)
            result.skipped.append("self_referral")
            return None

        # Same device as the referrer or as one of their earlier referrals
        seen = {r.device_fingerprint for r in self.repos.referrals.for_referrer(referrer.id)}
        seen.add(referrer.device_fingerprint)
        flagged = fingerprint in seen
        if flagged:
            self.logger.warning(
                "referral_device_repeat",
                referrer_id=referrer.id,
                referred_id=new_user_id,
                device=short_device_id(fingerprint),
            )

        record = self.referrals.create_referral(
            referrer=referrer,
            referred_user_id=new_user_id,
            referral_code=code,
            coins=self.rng.randint(self.min_coins, self.max_coins),
            fingerprint=fingerprint,
            flagged=flagged,
        )
        if record is None:
            result.skipped.append("already_referred")
        return record

    def _attribute_share(
        self,
        new_user_id: str,
        share_code: str,
        fingerprint: str,
        result: AttributionResult,
    ) -> ShareRecord | None:
        try:
            conversion = self.shares.convert(share_code, new_user_id, fingerprint)
        except NotFoundError:
            self.logger.info("share_link_not_found", share_code=share_code)
            result.skipped.append("share_link_not_found")
            return None

        if conversion.record is None:
            result.skipped.append("share_not_credited")
        return conversion.record
