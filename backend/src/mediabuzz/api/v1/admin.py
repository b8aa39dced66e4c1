"""Admin endpoints for users, referrals, share posts, share records and withdrawals."""

from fastapi import APIRouter, Depends, status

from mediabuzz.api.deps import ServiceContainer, get_services, require_admin
from mediabuzz.errors import NotFoundError
from mediabuzz.logging_config import get_logger
from mediabuzz.sharing.schemas import (
    AdminGrantRequest,
    CreateSharePostRequest,
    EnrichedShareRecord,
    UpdateRecordStatusRequest,
    UpdateSharePostRequest,
)
from mediabuzz.users.models import AdminUsersResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ==================== USERS ====================


@router.get("/users", response_model=AdminUsersResponse)
async def list_users(services: ServiceContainer = Depends(get_services)):
    users = services.users.list_users()
    return AdminUsersResponse(data=users, total=len(users))


# ==================== SHARE POSTS ====================


@router.get("/referral/share-posts")
async def list_share_posts(services: ServiceContainer = Depends(get_services)):
    return {"data": services.shares.list_posts()}


@router.post("/referral/share-posts", status_code=status.HTTP_201_CREATED)
async def create_share_post(
    body: CreateSharePostRequest,
    services: ServiceContainer = Depends(get_services),
):
    post = services.shares.create_post(body)
    return {"message": "Share post created successfully", "post": post}


@router.patch("/referral/share-posts/{post_id}")
async def update_share_post(
    post_id: str,
    body: UpdateSharePostRequest,
    services: ServiceContainer = Depends(get_services),
):
    post = services.shares.update_post(post_id, body)
    return {"message": "Share post updated successfully", "post": post}


@router.delete("/referral/share-posts/{post_id}")
async def delete_share_post(post_id: str, services: ServiceContainer = Depends(get_services)):
    services.shares.delete_post(post_id)
    return {"message": "Share post deleted successfully"}


# ==================== REFERRALS ====================


@router.get("/referral/referrals")
async def list_referrals(services: ServiceContainer = Depends(get_services)):
    """All referrals with referrer and referred user names."""
    return {"data": services.referrals.list_referrals_enriched()}


@router.patch("/referral/referrals/{referral_id}")
async def update_referral_status(
    referral_id: str,
    body: UpdateRecordStatusRequest,
    services: ServiceContainer = Depends(get_services),
):
    referral = services.referrals.update_status(referral_id, body.status, body.admin_note)
    return {"message": "Referral status updated", "referral": referral}


# ==================== SHARE RECORDS ====================


@router.get("/referral/share-records")
async def list_share_records(services: ServiceContainer = Depends(get_services)):
    """All share records with the beneficiary's name and email."""
    users = services.users.index_by_id()
    records = []
    for record in services.shares.list_records():
        user = users.get(record.user_id)
        records.append(EnrichedShareRecord(
            **record.model_dump(),
            user_name=user.name if user else "Unknown",
            user_email=user.email if user else "Unknown",
        ))
    return {"data": records}


@router.patch("/referral/share-records/{record_id}")
async def update_share_record_status(
    record_id: str,
    body: UpdateRecordStatusRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Approve or reject a share record. Coin amounts are never edited."""
    record = services.shares.update_record_status(record_id, body.status, body.admin_note)
    return {"message": "Share record status updated", "record": record}


@router.get("/referral/share-visitors")
async def list_share_visitors(services: ServiceContainer = Depends(get_services)):
    return {"data": services.shares.list_visitors()}


@router.post("/referral/coins")
async def grant_coins(body: AdminGrantRequest, services: ServiceContainer = Depends(get_services)):
    """Credit coins to a user identified by email.

    Creates an approved admin-post share record, immediately available.
    """
    user = services.repos.users.find_by_email(body.email)
    if user is None:
        raise NotFoundError("User not found with that email")

    record = services.shares.grant_admin_coins(user.id, body.coins, body.note)
    logger.info("admin_coins_granted", user_id=user.id, coins=body.coins, record_id=record.id)
    return {
        "success": True,
        "message": f"Successfully added {body.coins} coins to {user.email}",
        "shareRecord": record,
        "userInfo": {
            "databaseId": user.id,
            "firebaseUid": user.firebase_uid,
            "email": user.email,
        },
    }


# ==================== WITHDRAW REQUESTS ====================


@router.get("/withdraw-requests")
async def list_withdraw_requests(services: ServiceContainer = Depends(get_services)):
    """All withdraw requests with user name and email."""
    return {"data": services.withdrawals.list_enriched(services.users.index_by_id())}
