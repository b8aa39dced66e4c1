"""Withdraw request endpoints."""

from fastapi import APIRouter, Depends, Query, status

from mediabuzz.api.deps import ServiceContainer, get_services, require_admin
from mediabuzz.earnings.schemas import CreateWithdrawRequest, UpdateWithdrawStatusRequest
from mediabuzz.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/withdraw-requests", tags=["withdraw"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_withdraw_request(
    body: CreateWithdrawRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Request a payout of earned coins.

    Fails with 400 when the amount exceeds the available balance or another
    request is still pending.
    """
    primary_id, aliases = services.user_ids(body.user_id)
    withdraw_request = services.withdrawals.create(primary_id, body.amount_coins, body.destination, *aliases)
    return {"message": "Withdraw request created successfully", "request": withdraw_request}


@router.get("")
async def get_withdraw_history(
    user_id: str = Query(..., alias="userId", min_length=1),
    services: ServiceContainer = Depends(get_services),
):
    primary_id, aliases = services.user_ids(user_id)
    return {"data": services.withdrawals.history(primary_id, *aliases)}


@router.patch("/{request_id}", dependencies=[Depends(require_admin)])
async def update_withdraw_status(
    request_id: str,
    body: UpdateWithdrawStatusRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Approve or reject a pending withdraw request (admin)."""
    withdraw_request = services.withdrawals.update_status(request_id, body.status, body.admin_note)
    return {"message": "Withdraw request status updated", "request": withdraw_request}
