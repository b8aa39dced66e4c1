"""Earnings ledger: per-user coin balances computed from source records."""

from mediabuzz.earnings.models import UserEarnings, WithdrawStatus
from mediabuzz.referral.models import RecordStatus
from mediabuzz.sharing.models import ShareType
from mediabuzz.storage.repo import Repositories


class EarningsLedger:
    """Read-side aggregation over referral, share and withdraw records.

    Nothing is cached: every call reloads the source collections.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos

    def compute_balance(self, user_id: str, *aliases: str) -> UserEarnings:
        """Balance for ``user_id``.

        Approved referral and share records make up the total; pending ones
        are reported separately. Pending and approved withdrawals are
        subtracted from the available coins, rejected ones are not.

        Args:
            user_id: Database id of the user
            aliases: Other ids records may carry for the same user (e.g. the
                identity-provider uid on older withdraw requests)
        """
        ids = {user_id, *aliases}

        referrals = [r for r in self.repos.referrals.list_all() if r.referrer_user_id in ids]
        shares = [s for s in self.repos.share_records.list_all() if s.user_id in ids]
        withdrawals = [w for w in self.repos.withdraw_requests.list_all() if w.user_id in ids]

        referral_coins = sum(r.coins_earned for r in referrals if r.status == RecordStatus.APPROVED)
        approved_shares = [s for s in shares if s.status == RecordStatus.APPROVED]
        admin_post_coins = sum(s.coins_earned for s in approved_shares if s.share_type == ShareType.ADMIN_POST)
        random_share_coins = sum(s.coins_earned for s in approved_shares if s.share_type != ShareType.ADMIN_POST)

        pending_coins = (
            sum(r.coins_earned for r in referrals if r.status == RecordStatus.PENDING)
            + sum(s.coins_earned for s in shares if s.status == RecordStatus.PENDING)
        )

        pending_withdraw = sum(w.amount_coins for w in withdrawals if w.status == WithdrawStatus.PENDING)
        approved_withdraw = sum(w.amount_coins for w in withdrawals if w.status == WithdrawStatus.APPROVED)

        share_coins = admin_post_coins + random_share_coins
        total_coins = referral_coins + share_coins

        return UserEarnings(
            total_coins=total_coins,
            referral_coins=referral_coins,
            share_coins=share_coins,
            admin_post_share_coins=admin_post_coins,
            random_share_coins=random_share_coins,
            pending_coins=pending_coins,
            pending_withdraw=pending_withdraw,
            approved_withdraw=approved_withdraw,
            available_coins=total_coins - pending_withdraw - approved_withdraw,
        )
