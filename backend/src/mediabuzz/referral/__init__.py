"""Referral module.

Handles the personal invite flow:
- Referral code generation
- Referral records created on signup
- Device fingerprint checks against repeat signups
"""

from mediabuzz.referral.codes import generate_referral_code, normalize_referral_code
from mediabuzz.referral.models import RecordStatus, ReferralRecord

__all__ = [
    "RecordStatus",
    "ReferralRecord",
    "generate_referral_code",
    "normalize_referral_code",
]
