"""Referral code generation."""

_BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

REFERRAL_CODE_PREFIX = "REF"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_referral_code(user_id: str, email: str) -> str:
    """Derive a user's referral code.

    Sums the character codes of ``"<user_id>-<email>"`` and takes up to eight
    base36 digits, e.g. ``REF1A2B``. Same inputs always give the same code.
    Different users can end up with the same code; lookups resolve that.
    """
    checksum = sum(ord(char) for char in f"{user_id}-{email}")
    return f"{REFERRAL_CODE_PREFIX}{_to_base36(checksum)[:8]}"


def normalize_referral_code(code: str | None) -> str | None:
    """Normalize user input (``?ref=`` values are often lowercased or padded)."""
    if not code:
        return None
    code = code.strip().upper()
    return code or None
