# utils/time_utils.py
from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc)


def _to_utc_aware(dt):
    if dt is None:
        return None
    return (
        dt.replace(tzinfo=timezone.utc)
        if (dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None)
        else dt.astimezone(timezone.utc)
    )
