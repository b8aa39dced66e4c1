"""Earnings ledger and withdraw requests."""

from mediabuzz.earnings.models import UserEarnings, WithdrawRequest, WithdrawStatus

__all__ = ["UserEarnings", "WithdrawRequest", "WithdrawStatus"]
