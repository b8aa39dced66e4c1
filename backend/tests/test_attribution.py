"""Tests for signup attribution of referrals and share links."""

from mediabuzz.referral.device import generate_device_fingerprint
from mediabuzz.referral.models import RecordStatus
from mediabuzz.sharing.models import ShareType


class TestReferralAttribution:
    def test_referral_creates_pending_record(self, services, make_user):
        referrer = make_user("b@example.com", referral_code="REF12345678")
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(
            new_user.id,
            new_user.email,
            referral_code="REF12345678",
            request_ip="10.0.0.2",
            user_agent="UA-A",
        )

        referral = result.referral
        assert referral.status == RecordStatus.PENDING
        assert referral.referrer_user_id == referrer.id
        assert referral.referred_user_id == new_user.id
        assert 5 <= referral.coins_earned <= 100
        assert referral.flagged is False
        assert services.repos.referrals.list_all() == [referral]

    def test_code_lookup_is_case_insensitive(self, services, make_user):
        referrer = make_user("b@example.com", referral_code="REFABC")
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(new_user.id, new_user.email, referral_code=" refabc ")

        assert result.referral.referrer_user_id == referrer.id

    def test_user_is_referred_at_most_once(self, services, make_user):
        make_user("b@example.com", referral_code="REFB")
        make_user("c@example.com", referral_code="REFC")
        new_user = make_user("a@example.com")

        services.attribution.process_signup(new_user.id, new_user.email, referral_code="REFB")
        again = services.attribution.process_signup(new_user.id, new_user.email, referral_code="REFB")
        other = services.attribution.process_signup(new_user.id, new_user.email, referral_code="REFC")

        assert again.referral is None
        assert "already_referred" in again.skipped
        assert other.referral is None
        assert len(services.repos.referrals.list_all()) == 1

    def test_unknown_code_is_skipped(self, services, make_user):
        new_user = make_user("a@example.com")
        result = services.attribution.process_signup(new_user.id, new_user.email, referral_code="REFNOPE")

        assert result.referral is None
        assert result.skipped == ["referrer_not_found"]

    def test_self_referral_is_skipped(self, services, make_user):
        user = make_user("a@example.com", referral_code="REFSELF")
        result = services.attribution.process_signup(user.id, user.email, referral_code="REFSELF")

        assert result.skipped == ["self_referral"]
        assert services.repos.referrals.list_all() == []

    def test_repeat_device_is_flagged(self, services, make_user):
        make_user("b@example.com", referral_code="REFB")
        first = make_user("a1@example.com")
        second = make_user("a2@example.com")

        services.attribution.process_signup(
            first.id, first.email, referral_code="REFB", request_ip="10.0.0.9", user_agent="UA"
        )
        result = services.attribution.process_signup(
            second.id, second.email, referral_code="REFB", request_ip="10.0.0.9", user_agent="UA"
        )

        assert result.referral.flagged is True
        assert result.referral.status == RecordStatus.PENDING
        assert len(services.repos.referrals.list_all()) == 2

    def test_review_without_note_keeps_flag_note(self, services, make_user):
        make_user("b@example.com", referral_code="REFB")
        first = make_user("a1@example.com")
        second = make_user("a2@example.com")
        services.attribution.process_signup(
            first.id, first.email, referral_code="REFB", request_ip="10.0.0.9", user_agent="UA"
        )
        flagged = services.attribution.process_signup(
            second.id, second.email, referral_code="REFB", request_ip="10.0.0.9", user_agent="UA"
        ).referral

        reviewed = services.referrals.update_status(flagged.id, RecordStatus.APPROVED)

        assert reviewed.status == RecordStatus.APPROVED
        assert reviewed.admin_note == "Repeat device fingerprint in referral chain"

        replaced = services.referrals.update_status(flagged.id, RecordStatus.REJECTED, "Same household")
        assert replaced.admin_note == "Same household"

    def test_referrer_own_device_is_flagged(self, services, make_user):
        fingerprint = generate_device_fingerprint("10.0.0.9", "UA")
        make_user("b@example.com", referral_code="REFB", device_fingerprint=fingerprint)
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(
            new_user.id, new_user.email, referral_code="REFB", request_ip="10.0.0.9", user_agent="UA"
        )

        assert result.referral.flagged is True

    def test_colliding_codes_pick_first_user(self, services, make_user):
        first = make_user("b@example.com", referral_code="REFSAME")
        make_user("c@example.com", referral_code="REFSAME")
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(new_user.id, new_user.email, referral_code="REFSAME")

        assert result.referral.referrer_user_id == first.id


class TestShareAttribution:
    def test_share_code_credits_link_owner(self, services, make_user):
        owner = make_user("owner@example.com")
        link = services.shares.create_share_link(owner.id, ShareType.SHARE_LINK, "https://x.test")
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(
            new_user.id, new_user.email, share_code=link.id, request_ip="10.0.0.3", user_agent="UA"
        )

        assert result.share_record.user_id == owner.id
        assert result.share_record.status == RecordStatus.PENDING
        assert services.shares.get_share_link(link.id).registration_count == 1

    def test_unknown_share_code_is_skipped(self, services, make_user):
        new_user = make_user("a@example.com")
        result = services.attribution.process_signup(new_user.id, new_user.email, share_code="SHARE-nope")

        assert result.share_record is None
        assert result.skipped == ["share_link_not_found"]

    def test_referral_and_share_together(self, services, make_user):
        referrer = make_user("b@example.com", referral_code="REFB")
        link = services.shares.create_share_link(referrer.id, ShareType.SHARE_LINK, "https://x.test")
        new_user = make_user("a@example.com")

        result = services.attribution.process_signup(
            new_user.id, new_user.email, referral_code="REFB", share_code=link.id
        )

        assert result.referral is not None
        assert result.share_record is not None


class TestRun:
    def test_failures_are_swallowed(self, services, make_user, monkeypatch):
        make_user("b@example.com", referral_code="REFB")
        new_user = make_user("a@example.com")

        def _boom(code):
            raise RuntimeError("storage exploded")

        monkeypatch.setattr(services.referrals, "find_referrer", _boom)

        assert services.attribution.run(new_user.id, new_user.email, referral_code="REFB") is None
        assert services.repos.referrals.list_all() == []

    def test_run_returns_result(self, services, make_user):
        make_user("b@example.com", referral_code="REFB")
        new_user = make_user("a@example.com")

        result = services.attribution.run(new_user.id, new_user.email, referral_code="REFB")

        assert result.referral is not None
