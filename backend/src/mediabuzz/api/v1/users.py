"""User registration sync endpoint."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from mediabuzz.api.deps import ServiceContainer, get_services
from mediabuzz.api.rate_limit import limiter
from mediabuzz.logging_config import get_logger
from mediabuzz.referral.device import get_client_ip
from mediabuzz.users.models import PublicUser, RegisterUserRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=PublicUser)
@limiter.limit("10/minute")
async def register_user(
    request: Request,
    body: RegisterUserRequest,
    background_tasks: BackgroundTasks,
    services: ServiceContainer = Depends(get_services),
):
    """Create or sync a platform user after identity-provider signup.

    Referral and share codes on a new user's first registration are
    attributed after the response is sent; attribution failures are logged
    and never affect this response.
    """
    request_ip = get_client_ip(request)
    user_agent = request.headers.get("user-agent")

    user, created = services.users.register(body, request_ip=request_ip, user_agent=user_agent)

    if created and (body.referral_code or body.share_code):
        background_tasks.add_task(
            services.attribution.run,
            user.id,
            user.email,
            referral_code=body.referral_code,
            share_code=body.share_code,
            request_ip=request_ip,
            user_agent=user_agent,
        )
        logger.info(
            "signup_attribution_scheduled",
            user_id=user.id,
            has_referral=bool(body.referral_code),
            has_share=bool(body.share_code),
        )

    return PublicUser.from_user(user)
