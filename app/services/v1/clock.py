from datetime import date, datetime, timezone, tzinfo
from typing import Optional


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Naive datetimes from the API are taken as clinic-local time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def local_today(tz: tzinfo, now: Optional[datetime] = None) -> date:
    current = now or datetime.now(timezone.utc)
    return to_local(current, tz).date()


def minutes_between(earlier: datetime, later: datetime, tz: tzinfo) -> int:
    delta = to_local(later, tz) - to_local(earlier, tz)
    return max(int(delta.total_seconds() // 60), 0)


__all__ = ["to_local", "local_today", "minutes_between"]
