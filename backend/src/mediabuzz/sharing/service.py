"""Share link service: share posts, trackable links, visits and coin grants."""

import random
from dataclasses import dataclass

from mediabuzz.errors import NotFoundError, ValidationError
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.device import short_device_id
from mediabuzz.referral.models import RecordStatus
from mediabuzz.sharing.models import (
    ADMIN_GRANT_LINK,
    SharePost,
    SharePostStatus,
    ShareLink,
    ShareRecord,
    ShareType,
    ShareVisitor,
)
from mediabuzz.sharing.schemas import CreateSharePostRequest, UpdateSharePostRequest
from mediabuzz.storage.models import new_record_id, utcnow
from mediabuzz.storage.repo import Repositories

logger = get_logger(__name__)


@dataclass
class ConversionResult:
    """Outcome of crediting a share link for a signup."""
    record: ShareRecord | None
    counted: bool  # registration_count was incremented
    flagged: bool


class ShareService:
    """Service for share posts, share links and share-driven coin grants."""

    def __init__(
        self,
        repos: Repositories,
        public_base_url: str,
        min_coins: int = 5,
        max_coins: int = 100,
        rng: random.Random | None = None,
    ):
        self.repos = repos
        self.public_base_url = public_base_url.rstrip("/")
        self.min_coins = min_coins
        self.max_coins = max_coins
        self.rng = rng or random.SystemRandom()
        self.logger = get_logger(__name__)

    def random_coins(self) -> int:
        """Coin amount for a conversion without a fixed value."""
        return self.rng.randint(self.min_coins, self.max_coins)

    # ==================== SHARE POSTS ====================

    def list_posts(self) -> list[SharePost]:
        return self.repos.share_posts.list_all()

    def list_active_posts(self) -> list[SharePost]:
        return self.repos.share_posts.filter(lambda p: p.status == SharePostStatus.ACTIVE)

    def list_popup_posts(self) -> list[SharePost]:
        """Active posts configured to show as pop-ups that carry an image or video."""
        return self.repos.share_posts.filter(lambda p: p.is_popup_candidate)

    def create_post(self, body: CreateSharePostRequest) -> SharePost:
        data = body.model_dump(exclude_none=True)
        post = SharePost(id=new_record_id("POST"), **data)
        self.repos.share_posts.add(post)
        self.logger.info("share_post_created", post_id=post.id, coin_value=post.coin_value)
        return post

    def update_post(self, post_id: str, body: UpdateSharePostRequest) -> SharePost:
        changes = body.model_dump(exclude_unset=True)

        def _apply(post: SharePost) -> SharePost:
            return post.model_copy(update={**changes, "updated_at": utcnow()})

        post = self.repos.share_posts.update(post_id, _apply)
        self.logger.info("share_post_updated", post_id=post_id, fields=sorted(changes))
        return post

    def delete_post(self, post_id: str) -> None:
        if not self.repos.share_posts.delete(post_id):
            raise NotFoundError("Share post not found")
        self.logger.info("share_post_deleted", post_id=post_id)

    # ==================== SHARE LINKS ====================

    def share_url(self, share_code: str) -> str:
        return f"{self.public_base_url}/signup?share={share_code}"

    def create_share_link(
        self,
        user_id: str,
        share_type: ShareType,
        share_link: str,
        share_post_id: str | None = None,
    ) -> ShareLink:
        """Create a trackable share link for a user.

        Raises:
            ValidationError: If fields are missing or the post is not active
        """
        if not user_id or not share_link:
            raise ValidationError("Missing required fields")

        if share_type == ShareType.ADMIN_POST:
            if not share_post_id:
                raise ValidationError("sharePostId required for admin_post type")
            post = self.repos.share_posts.get_by_id(share_post_id)
            if post is None or post.status != SharePostStatus.ACTIVE:
                raise ValidationError("Invalid or inactive share post")
        else:
            share_post_id = None

        link = ShareLink(
            id=new_record_id("SHARE"),
            user_id=user_id,
            share_type=share_type,
            share_post_id=share_post_id,
            share_link=share_link,
        )
        self.repos.share_links.add(link)
        self.logger.info("share_link_created", user_id=user_id, share_code=link.id, share_type=share_type.value)
        return link

    def get_share_link(self, share_code: str) -> ShareLink:
        return self.repos.share_links.require(share_code)

    def resolve_share_post(self, share_code: str) -> SharePost:
        """The post behind an admin-post share link.

        Raises:
            NotFoundError: If the code is unknown or not tied to an existing post
        """
        link = self.get_share_link(share_code)
        if not link.share_post_id:
            raise NotFoundError("Share post not found")
        return self.repos.share_posts.require(link.share_post_id)

    def record_visit(
        self,
        share_code: str,
        fingerprint: str,
        user_agent: str | None = None,
    ) -> ShareVisitor:
        """Record a visit. Idempotent per (share_code, fingerprint).

        Raises:
            NotFoundError: If the share code is unknown
        """
        self.get_share_link(share_code)

        with self.repos.share_visitors.editing() as visitors:
            existing = next(
                (v for v in visitors if v.share_link == share_code and v.visitor_fingerprint == fingerprint),
                None,
            )
            if existing is not None:
                return existing

            visitor = ShareVisitor(
                id=new_record_id("VIS"),
                share_link=share_code,
                visitor_fingerprint=fingerprint,
                visitor_user_agent=user_agent,
            )
            visitors.append(visitor)

        self.logger.info("share_visit_recorded", share_code=share_code, device=short_device_id(fingerprint))
        return visitor

    def list_visitors(self) -> list[ShareVisitor]:
        return self.repos.share_visitors.list_all()

    # ==================== COIN GRANTS ====================

    def grant_share_coins(
        self,
        user_id: str,
        share_link: str,
        amount: int,
        share_type: ShareType = ShareType.SHARE_LINK,
        share_post_id: str | None = None,
        registration_count: int = 0,
        status: RecordStatus = RecordStatus.PENDING,
        flagged: bool = False,
        admin_note: str | None = None,
        id_prefix: str = "SHR",
    ) -> ShareRecord:
        """Create a new share record crediting ``amount`` coins to ``user_id``."""
        if amount < 0:
            raise ValidationError("Coin amount must not be negative")

        record = ShareRecord(
            id=new_record_id(id_prefix),
            user_id=user_id,
            share_type=share_type,
            share_post_id=share_post_id,
            share_link=share_link,
            coins_earned=amount,
            registration_count=registration_count,
            status=status,
            flagged=flagged,
            admin_note=admin_note,
        )
        self.repos.share_records.add(record)
        self.logger.info(
            "share_coins_granted",
            user_id=user_id,
            share_link=share_link,
            coins=amount,
            status=status.value,
            flagged=flagged,
        )
        return record

    def convert(self, share_code: str, new_user_id: str, fingerprint: str) -> ConversionResult:
        """Credit the owner of ``share_code`` for a signup.

        The link's registration count grows only for a fingerprint that has not
        converted on this link before; a repeat fingerprint still yields a
        pending record, flagged for review.

        Raises:
            NotFoundError: If the share code is unknown
        """
        link = self.get_share_link(share_code)

        if link.user_id == new_user_id:
            self.logger.info("share_self_conversion_ignored", share_code=share_code, user_id=new_user_id)
            return ConversionResult(record=None, counted=False, flagged=False)

        with self.repos.share_visitors.editing() as visitors:
            link_visitors = [v for v in visitors if v.share_link == share_code]

            if any(v.converted_to_user_id == new_user_id for v in link_visitors):
                self.logger.info("share_conversion_duplicate", share_code=share_code, user_id=new_user_id)
                return ConversionResult(record=None, counted=False, flagged=False)

            flagged = any(
                v.visitor_fingerprint == fingerprint and v.converted_to_user_id
                for v in link_visitors
            )
            if not flagged:
                visitor = next(
                    (v for v in link_visitors if v.visitor_fingerprint == fingerprint),
                    None,
                )
                if visitor is None:
                    visitor = ShareVisitor(
                        id=new_record_id("VIS"),
                        share_link=share_code,
                        visitor_fingerprint=fingerprint,
                    )
                    visitors.append(visitor)
                visitor.converted_to_user_id = new_user_id

        coins = self.random_coins()
        if link.share_type == ShareType.ADMIN_POST and link.share_post_id:
            post = self.repos.share_posts.get_by_id(link.share_post_id)
            coins = post.coin_value if post else 0

        counted = not flagged
        if counted:
            def _count(existing: ShareLink) -> ShareLink:
                existing.registration_count += 1
                return existing

            self.repos.share_links.update(share_code, _count)

        record = self.grant_share_coins(
            user_id=link.user_id,
            share_link=share_code,
            amount=coins,
            share_type=link.share_type,
            share_post_id=link.share_post_id,
            registration_count=1 if counted else 0,
            flagged=flagged,
            admin_note="Repeat device fingerprint on this share link" if flagged else None,
        )
        if flagged:
            self.logger.warning(
                "share_conversion_flagged",
                share_code=share_code,
                new_user_id=new_user_id,
                device=short_device_id(fingerprint),
            )
        return ConversionResult(record=record, counted=counted, flagged=flagged)

    def grant_admin_coins(self, user_id: str, coins: int, note: str | None = None) -> ShareRecord:
        """Approved grant made by an admin."""
        if coins <= 0:
            raise ValidationError("Valid email and positive coins amount are required")
        return self.grant_share_coins(
            user_id=user_id,
            share_link=ADMIN_GRANT_LINK,
            amount=coins,
            share_type=ShareType.ADMIN_POST,
            status=RecordStatus.APPROVED,
            admin_note=note or f"Admin grant of {coins} coins",
            id_prefix="ADMIN",
        )

    # ==================== HISTORY & REVIEW ====================

    def share_history(self, user_id: str) -> list[ShareRecord]:
        """User's share records, newest first."""
        records = self.repos.share_records.for_user(user_id)
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def list_records(self) -> list[ShareRecord]:
        return self.repos.share_records.list_all()

    def update_record_status(
        self,
        record_id: str,
        status: RecordStatus,
        admin_note: str | None = None,
    ) -> ShareRecord:
        """Admin review. Only status and note change; coins stay as granted.

        A missing note keeps the existing one, such as the repeat-device flag note.
        """

        def _review(record: ShareRecord) -> ShareRecord:
            record.status = status
            if admin_note is not None:
                record.admin_note = admin_note
            return record

        record = self.repos.share_records.update(record_id, _review)
        self.logger.info("share_record_reviewed", record_id=record_id, status=status.value)
        return record
