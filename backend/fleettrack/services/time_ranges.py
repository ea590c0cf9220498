"""
Dashboard time ranges and date-range filtering of records.
"""
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Tuple
from fleettrack.core.utils import to_date
import enum


class TimeRange(str, enum.Enum):
    """Time range options offered on the analytics dashboard."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisWeek"
    LAST_WEEK = "lastWeek"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    LAST_7_DAYS = "last7Days"
    LAST_30_DAYS = "last30Days"
    THIS_YEAR = "thisYear"
    ALL = "all"


def resolve_time_range(time_range: Any, today: Optional[date] = None) -> Tuple[Optional[date], Optional[date]]:
    """
    Inclusive (start, end) dates for a time range; (None, None) means unbounded.
    Weeks start on Monday.
    """
    time_range = TimeRange(time_range)
    today = today or date.today()

    if time_range == TimeRange.TODAY:
        return today, today
    if time_range == TimeRange.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if time_range == TimeRange.THIS_WEEK:
        return today - timedelta(days=today.weekday()), today
    if time_range == TimeRange.LAST_WEEK:
        this_monday = today - timedelta(days=today.weekday())
        return this_monday - timedelta(days=7), this_monday - timedelta(days=1)
    if time_range == TimeRange.THIS_MONTH:
        return today.replace(day=1), today
    if time_range == TimeRange.LAST_MONTH:
        last_day = today.replace(day=1) - timedelta(days=1)
        return last_day.replace(day=1), last_day
    if time_range == TimeRange.LAST_7_DAYS:
        return today - timedelta(days=6), today
    if time_range == TimeRange.LAST_30_DAYS:
        return today - timedelta(days=29), today
    if time_range == TimeRange.THIS_YEAR:
        return today.replace(month=1, day=1), today
    return None, None


def filter_by_date_range(
    records: Iterable[Any],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Any]:
    """Records whose date falls within [start_date, end_date]."""
    filtered = []
    for record in records or []:
        record_date = to_date(record["date"] if isinstance(record, dict) else record.date)
        if start_date is not None and record_date < start_date:
            continue
        if end_date is not None and record_date > end_date:
            continue
        filtered.append(record)
    return filtered
