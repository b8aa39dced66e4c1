"""Share posts, trackable share links and share-driven coin grants."""

from mediabuzz.sharing.models import (
    SharePost,
    SharePostStatus,
    ShareLink,
    ShareRecord,
    ShareType,
    ShareVisitor,
)

__all__ = [
    "SharePost",
    "SharePostStatus",
    "ShareLink",
    "ShareRecord",
    "ShareType",
    "ShareVisitor",
]
