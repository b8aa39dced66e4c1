"""Rate limiting configuration for the MediaBuzz API."""

from slowapi import Limiter

from mediabuzz.referral.device import get_client_ip
from mediabuzz.settings import settings

# Single shared limiter instance - disabled in non-production environments
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["200/minute"],
    storage_uri="memory://",
    enabled=settings.is_production,
)
