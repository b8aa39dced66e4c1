"""Base record model shared by every stored entity."""

import secrets
import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Base36 alphabet for record id suffixes
_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_record_id(prefix: str, suffix_length: int = 6) -> str:
    """Generate a record id such as ``WDR1718000000000K3J9QZ``.

    Millisecond timestamp followed by a random base36 suffix.
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(suffix_length))
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


class RecordModel(BaseModel):
    """Stored record.

    Field names are snake_case in Python and camelCase on disk, in the
    document database and over HTTP.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str

    def to_record(self) -> dict[str, Any]:
        """Serialize for the record store."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
