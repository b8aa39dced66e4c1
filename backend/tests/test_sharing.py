"""Tests for share posts, share links, visits and conversions."""

import pytest

from mediabuzz.errors import NotFoundError, ValidationError
from mediabuzz.referral.models import RecordStatus
from mediabuzz.sharing.models import ADMIN_GRANT_LINK, SharePostStatus, ShareType
from mediabuzz.sharing.schemas import CreateSharePostRequest, UpdateSharePostRequest


@pytest.fixture
def post(services):
    return services.shares.create_post(
        CreateSharePostRequest(title="Summer pack", url="https://mediabuzz.test/p/1", coinValue=40)
    )


@pytest.fixture
def link(services, make_user):
    owner = make_user("owner@example.com")
    return services.shares.create_share_link(owner.id, ShareType.SHARE_LINK, "https://mediabuzz.test/v/9")


class TestSharePosts:
    def test_create_defaults(self, post):
        assert post.id.startswith("POST")
        assert post.status == SharePostStatus.ACTIVE
        assert post.show_delay == 2000

    def test_update_and_delete(self, services, post):
        updated = services.shares.update_post(post.id, UpdateSharePostRequest(status="inactive"))
        assert updated.status == SharePostStatus.INACTIVE
        assert updated.coin_value == 40
        assert services.shares.list_active_posts() == []

        services.shares.delete_post(post.id)
        with pytest.raises(NotFoundError):
            services.shares.delete_post(post.id)

    def test_popup_posts_need_media(self, services):
        services.shares.create_post(
            CreateSharePostRequest(title="No media", url="u", coinValue=5, showAsPopup=True)
        )
        with_image = services.shares.create_post(
            CreateSharePostRequest(title="Image", url="u", coinValue=5, showAsPopup=True, imageUrl="i.png")
        )
        services.shares.create_post(
            CreateSharePostRequest(title="Not popup", url="u", coinValue=5, videoUrl="v.mp4")
        )

        assert [p.id for p in services.shares.list_popup_posts()] == [with_image.id]


class TestShareLinks:
    def test_create_share_link(self, services, link):
        assert link.id.startswith("SHARE")
        assert link.registration_count == 0
        assert services.shares.share_url(link.id) == f"https://mediabuzz.test/signup?share={link.id}"

    def test_admin_post_requires_active_post(self, services, make_user, post):
        owner = make_user("owner@example.com")

        with pytest.raises(ValidationError):
            services.shares.create_share_link(owner.id, ShareType.ADMIN_POST, "x")
        with pytest.raises(ValidationError):
            services.shares.create_share_link(owner.id, ShareType.ADMIN_POST, "x", share_post_id="POST0")

        services.shares.update_post(post.id, UpdateSharePostRequest(status="inactive"))
        with pytest.raises(ValidationError):
            services.shares.create_share_link(owner.id, ShareType.ADMIN_POST, "x", share_post_id=post.id)

    def test_missing_fields(self, services):
        with pytest.raises(ValidationError):
            services.shares.create_share_link("", ShareType.SHARE_LINK, "x")

    def test_resolve_share_post(self, services, make_user, post, link):
        owner = make_user("poster@example.com")
        post_link = services.shares.create_share_link(
            owner.id, ShareType.ADMIN_POST, post.url, share_post_id=post.id
        )

        assert services.shares.resolve_share_post(post_link.id).id == post.id
        with pytest.raises(NotFoundError):
            services.shares.resolve_share_post(link.id)
        with pytest.raises(NotFoundError):
            services.shares.resolve_share_post("SHARE-unknown")


class TestVisits:
    def test_visit_is_idempotent_per_fingerprint(self, services, link):
        first = services.shares.record_visit(link.id, "fp-1", "UA")
        again = services.shares.record_visit(link.id, "fp-1", "UA")
        services.shares.record_visit(link.id, "fp-2", "UA")

        assert again.id == first.id
        assert len(services.repos.share_visitors.for_link(link.id)) == 2

    def test_visit_does_not_count_registration(self, services, link):
        services.shares.record_visit(link.id, "fp-1")
        assert services.shares.get_share_link(link.id).registration_count == 0

    def test_unknown_code(self, services):
        with pytest.raises(NotFoundError):
            services.shares.record_visit("SHARE-unknown", "fp-1")


class TestConversion:
    def test_conversion_credits_owner(self, services, link):
        services.shares.record_visit(link.id, "fp-1")

        result = services.shares.convert(link.id, "USR-new", "fp-1")

        assert result.counted is True
        assert result.flagged is False
        assert result.record.user_id == link.user_id
        assert result.record.status == RecordStatus.PENDING
        assert 5 <= result.record.coins_earned <= 100
        assert services.shares.get_share_link(link.id).registration_count == 1

        (visitor,) = services.repos.share_visitors.for_link(link.id)
        assert visitor.converted_to_user_id == "USR-new"

    def test_repeat_fingerprint_is_flagged_not_counted(self, services, link):
        services.shares.convert(link.id, "USR-a", "fp-1")
        result = services.shares.convert(link.id, "USR-b", "fp-1")

        assert result.flagged is True
        assert result.counted is False
        assert result.record.flagged is True
        assert result.record.status == RecordStatus.PENDING
        assert services.shares.get_share_link(link.id).registration_count == 1

    def test_same_user_converts_once(self, services, link):
        services.shares.convert(link.id, "USR-a", "fp-1")
        result = services.shares.convert(link.id, "USR-a", "fp-2")

        assert result.record is None
        assert len(services.repos.share_records.for_user(link.user_id)) == 1

    def test_owner_cannot_convert_own_link(self, services, link):
        result = services.shares.convert(link.id, link.user_id, "fp-1")
        assert result.record is None
        assert services.shares.get_share_link(link.id).registration_count == 0

    def test_admin_post_pays_coin_value(self, services, make_user, post):
        owner = make_user("poster@example.com")
        post_link = services.shares.create_share_link(
            owner.id, ShareType.ADMIN_POST, post.url, share_post_id=post.id
        )

        result = services.shares.convert(post_link.id, "USR-new", "fp-1")

        assert result.record.coins_earned == 40
        assert result.record.share_type == ShareType.ADMIN_POST


class TestGrantsAndReview:
    def test_admin_grant_is_approved(self, services, make_user):
        user = make_user("lucky@example.com")
        record = services.shares.grant_admin_coins(user.id, 250, "Contest prize")

        assert record.id.startswith("ADMIN")
        assert record.status == RecordStatus.APPROVED
        assert record.share_link == ADMIN_GRANT_LINK
        assert record.coins_earned == 250

    def test_review_keeps_coins(self, services, link):
        record = services.shares.convert(link.id, "USR-a", "fp-1").record

        reviewed = services.shares.update_record_status(record.id, RecordStatus.APPROVED, "ok")

        assert reviewed.status == RecordStatus.APPROVED
        assert reviewed.admin_note == "ok"
        assert reviewed.coins_earned == record.coins_earned

    def test_review_without_note_keeps_flag_note(self, services, link):
        services.shares.convert(link.id, "USR-a", "fp-1")
        flagged = services.shares.convert(link.id, "USR-b", "fp-1").record

        reviewed = services.shares.update_record_status(flagged.id, RecordStatus.REJECTED)

        assert reviewed.status == RecordStatus.REJECTED
        assert reviewed.admin_note == "Repeat device fingerprint on this share link"
        assert services.repos.share_records.require(flagged.id).admin_note == reviewed.admin_note

    def test_review_unknown_record(self, services):
        with pytest.raises(NotFoundError):
            services.shares.update_record_status("SHR-missing", RecordStatus.APPROVED)
