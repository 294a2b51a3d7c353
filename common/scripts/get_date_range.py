from datetime import date, timedelta
from typing import Optional


def get_week_date_range(target_date: Optional[date] = None) -> tuple[date, date, int]:
    """
    Monday..Sunday bounds and ISO week number of the week holding target_date.

    Example:
        >>> get_week_date_range(date(2024, 1, 10))
        (datetime.date(2024, 1, 8), datetime.date(2024, 1, 14), 2)
    """
    _date = target_date or date.today()
    week_start = _date - timedelta(days=_date.weekday())
    return week_start, week_start + timedelta(days=6), _date.isocalendar()[1]


__all__ = ["get_week_date_range"]
