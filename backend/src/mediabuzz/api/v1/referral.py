"""Referral and share link endpoints."""

from fastapi import APIRouter, Depends, Request

from mediabuzz.api.deps import ServiceContainer, get_services, require_user
from mediabuzz.api.rate_limit import limiter
from mediabuzz.earnings.models import UserEarnings
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.device import fingerprint_request
from mediabuzz.sharing.schemas import ShareLinkRequest, ShareLinkResponse, TrackVisitRequest
from mediabuzz.users.models import PlatformUser

logger = get_logger(__name__)

router = APIRouter(prefix="/referral", tags=["referral"])


# ==================== USER VIEWS ====================


@router.get("/users/{user_id}/code")
async def get_referral_code(
    user: PlatformUser = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
):
    """Get the user's referral code and signup link.

    Generates the code on first use.
    """
    return services.referrals.get_referral_info(user)


@router.get("/users/{user_id}/earnings", response_model=UserEarnings)
async def get_earnings(user_id: str, services: ServiceContainer = Depends(get_services)):
    """Coin balance derived from referral, share and withdraw records."""
    primary_id, aliases = services.user_ids(user_id)
    return services.ledger.compute_balance(primary_id, *aliases)


@router.get("/users/{user_id}/referrals")
async def get_referral_history(user_id: str, services: ServiceContainer = Depends(get_services)):
    primary_id, _ = services.user_ids(user_id)
    return {"data": services.referrals.referral_history(primary_id)}


@router.get("/users/{user_id}/shares")
async def get_share_history(user_id: str, services: ServiceContainer = Depends(get_services)):
    primary_id, _ = services.user_ids(user_id)
    return {"data": services.shares.share_history(primary_id)}


# ==================== SHARE POSTS ====================


@router.get("/share-posts")
async def get_active_share_posts(services: ServiceContainer = Depends(get_services)):
    return {"data": services.shares.list_active_posts()}


@router.get("/share-posts/popup")
async def get_popup_share_posts(services: ServiceContainer = Depends(get_services)):
    """Active share posts to show as pop-ups (with an image or video)."""
    return {"data": services.shares.list_popup_posts()}


# ==================== SHARE LINKS ====================


@router.post("/share", response_model=ShareLinkResponse)
@limiter.limit("30/minute")
async def create_share_link(
    request: Request,
    body: ShareLinkRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Create a trackable share link for a user."""
    primary_id, _ = services.user_ids(body.user_id)
    link = services.shares.create_share_link(
        user_id=primary_id,
        share_type=body.share_type,
        share_link=body.share_link,
        share_post_id=body.share_post_id,
    )
    return ShareLinkResponse(
        share_url=services.shares.share_url(link.id),
        share_code=link.id,
    )


@router.post("/visit")
@limiter.limit("60/minute")
async def track_visit(
    request: Request,
    body: TrackVisitRequest,
    services: ServiceContainer = Depends(get_services),
):
    """Record a visit to a share link. Repeat visits from one device are counted once."""
    services.shares.record_visit(
        body.share_code.strip(),
        fingerprint_request(request),
        user_agent=request.headers.get("user-agent"),
    )
    return {"message": "Visitor tracked"}


@router.get("/share/{share_code}")
async def get_shared_post(share_code: str, services: ServiceContainer = Depends(get_services)):
    """The share post behind an admin-post share link."""
    return {"data": services.shares.resolve_share_post(share_code)}
