from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter

_DATETIME = TypeAdapter(datetime)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a PostgREST timestamp into an aware datetime (naive values are taken as UTC).

    PostgREST trims trailing zeros from fractional seconds, so any precision must parse.
    """
    if not value:
        return None
    parsed = _DATETIME.validate_python(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
