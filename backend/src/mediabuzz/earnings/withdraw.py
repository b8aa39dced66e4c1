"""Withdraw request manager."""

import threading
from typing import Any

from mediabuzz.earnings.ledger import EarningsLedger
from mediabuzz.earnings.models import WithdrawRequest, WithdrawStatus
from mediabuzz.errors import (
    InsufficientBalanceError,
    InvalidStatusTransitionError,
    PendingWithdrawExistsError,
    ValidationError,
)
from mediabuzz.logging_config import get_logger
from mediabuzz.storage.models import new_record_id, utcnow
from mediabuzz.storage.repo import Repositories

logger = get_logger(__name__)

# pending -> approved | rejected; both terminal
ALLOWED_TRANSITIONS = {
    WithdrawStatus.PENDING: {WithdrawStatus.APPROVED, WithdrawStatus.REJECTED},
    WithdrawStatus.APPROVED: set(),
    WithdrawStatus.REJECTED: set(),
}


class WithdrawService:
    """Service for creating and reviewing withdraw requests."""

    def __init__(
        self,
        repos: Repositories,
        ledger: EarningsLedger,
        min_withdraw_coins: int = 1,
        coins_per_payout_unit: int = 5000,
        payout_unit_amount: float = 100.0,
    ):
        self.repos = repos
        self.ledger = ledger
        self.min_withdraw_coins = min_withdraw_coins
        self.coins_per_payout_unit = coins_per_payout_unit
        self.payout_unit_amount = payout_unit_amount
        # Balance check and insert must not interleave between requests
        self._lock = threading.Lock()
        self.logger = get_logger(__name__)

    def payout_for(self, amount_coins: int) -> float:
        return round(amount_coins / self.coins_per_payout_unit * self.payout_unit_amount, 2)

    def create(self, user_id: str, amount_coins: int, destination: str, *aliases: str) -> WithdrawRequest:
        """Create a pending withdraw request.

        Args:
            user_id: Database id of the requesting user
            amount_coins: Coins to withdraw
            destination: Payout destination (bKash number)
            aliases: Other ids the user's records may carry

        Returns:
            The persisted request

        Raises:
            ValidationError: If fields are missing or below the minimum
            PendingWithdrawExistsError: If a request is already pending
            InsufficientBalanceError: If the amount exceeds available coins
        """
        destination = (destination or "").strip()
        if not user_id or not destination:
            raise ValidationError("Missing required fields")
        if amount_coins <= 0:
            raise ValidationError("Withdraw amount must be positive")
        if amount_coins < self.min_withdraw_coins:
            raise ValidationError(f"Minimum withdraw is {self.min_withdraw_coins} coins")

        with self._lock:
            if self.repos.withdraw_requests.has_pending(user_id, *aliases):
                raise PendingWithdrawExistsError("You already have a pending withdraw request")

            earnings = self.ledger.compute_balance(user_id, *aliases)
            if amount_coins > earnings.available_coins:
                self.logger.info(
                    "withdraw_request_insufficient",
                    user_id=user_id,
                    requested=amount_coins,
                    available=earnings.available_coins,
                )
                raise InsufficientBalanceError(amount_coins, earnings.available_coins)

            request = WithdrawRequest(
                id=new_record_id("WDR"),
                user_id=user_id,
                amount_coins=amount_coins,
                payout_amount=self.payout_for(amount_coins),
                destination=destination,
            )
            self.repos.withdraw_requests.add(request)

        self.logger.info(
            "withdraw_request_created",
            request_id=request.id,
            user_id=user_id,
            coins=amount_coins,
        )
        return request

    def update_status(
        self,
        request_id: str,
        new_status: WithdrawStatus,
        admin_note: str | None = None,
    ) -> WithdrawRequest:
        """Approve or reject a pending request.

        Raises:
            NotFoundError: If the request does not exist
            InvalidStatusTransitionError: If the request is not pending
        """

        def _transition(request: WithdrawRequest) -> WithdrawRequest:
            if new_status not in ALLOWED_TRANSITIONS[request.status]:
                raise InvalidStatusTransitionError(request.status.value, new_status.value)
            now = utcnow()
            request.status = new_status
            request.admin_note = admin_note
            request.updated_at = now
            request.processed_at = now
            return request

        with self._lock:
            request = self.repos.withdraw_requests.update(request_id, _transition)

        self.logger.info(
            f"withdraw_request_{new_status.value}",
            request_id=request_id,
            user_id=request.user_id,
            coins=request.amount_coins,
        )
        return request

    def history(self, user_id: str, *aliases: str) -> list[WithdrawRequest]:
        """User's requests, newest first."""
        requests = self.repos.withdraw_requests.for_user(user_id, *aliases)
        return sorted(requests, key=lambda w: w.created_at, reverse=True)

    def list_enriched(self, users: dict[str, Any]) -> list[dict[str, Any]]:
        """All requests with user name and email for the admin view."""
        enriched = []
        for request in self.repos.withdraw_requests.list_all():
            user = users.get(request.user_id)
            enriched.append({
                **request.model_dump(by_alias=True, mode="json"),
                "userName": user.name if user else "Unknown",
                "userEmail": user.email if user else "Unknown",
            })
        return enriched
