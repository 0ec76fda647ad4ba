"""
Time utilities for request timestamps.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Get current UTC time (timezone-aware, Python 3.12+ compatible)."""
    return datetime.now(timezone.utc)


def utc_iso(moment: Optional[datetime] = None) -> str:
    """ISO 8601 UTC timestamp with a trailing Z, e.g. 2025-09-09T12:00:00Z."""
    moment = (moment or utcnow()).astimezone(timezone.utc)
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def local_timezone_name() -> Optional[str]:
    """Best-effort name of the local timezone (IANA key when available)."""
    tzinfo = datetime.now().astimezone().tzinfo
    if tzinfo is None:
        return None
    key = getattr(tzinfo, "key", None)
    return key or tzinfo.tzname(None)
