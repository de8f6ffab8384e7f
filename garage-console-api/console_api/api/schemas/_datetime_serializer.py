# console_api/api/schemas/_datetime_serializer.py
from datetime import datetime, timezone

from console_api.core.clock import to_timestamp


def serialize_dt(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    # stored naive, always UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def serialize_ts(dt: datetime | None) -> int | None:
    # unix seconds, used for token expiries
    if dt is None:
        return None
    return to_timestamp(dt)
