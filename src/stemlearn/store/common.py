"""Identifier and timestamp helpers shared by the store modules."""

from __future__ import annotations

import secrets
import string
import time
from datetime import date, datetime, timezone

_BASE36 = string.digits + string.ascii_lowercase
ID_SUFFIX_LENGTH = 9


def new_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch millis>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(ID_SUFFIX_LENGTH))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_day(value: date) -> str:
    return value.isoformat()
