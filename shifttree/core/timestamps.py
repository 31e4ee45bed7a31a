from datetime import datetime, timezone
from typing import Optional, Union


def to_db_timestamp(value: datetime) -> str:
    """Naive UTC ISO string for a `timestamp without time zone` column."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


def parse_db_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse a stored timestamp; naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_iso_utc(value: Union[str, datetime, None]) -> Optional[str]:
    """ISO-8601 UTC with a trailing "Z", or None when there is no value."""
    if value is None:
        return None
    return parse_db_timestamp(value).isoformat() + "Z"
