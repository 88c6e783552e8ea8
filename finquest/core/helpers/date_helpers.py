import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Tuple
from zoneinfo import ZoneInfo


class DateHelper:
    """Helper functions for date operations"""

    @staticmethod
    def utcnow() -> datetime:
        """Current instant as a naive UTC datetime (the storage convention)"""
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_utc_naive(value: datetime) -> datetime:
        """Normalize aware datetimes to naive UTC, leave naive ones as is"""
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @staticmethod
    def get_zone(name: str) -> tzinfo:
        if name.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(name)

    @staticmethod
    def challenge_window(started_at: datetime, duration_days: int) -> Tuple[datetime, datetime]:
        """Half-open [start, end) evaluation window of an enrollment"""
        start = DateHelper.to_utc_naive(started_at)
        return start, start + timedelta(days=duration_days)

    @staticmethod
    def in_window(moment: datetime, start: datetime, end: datetime) -> bool:
        return start <= DateHelper.to_utc_naive(moment) < end

    @staticmethod
    def local_date(moment: datetime, zone: tzinfo = timezone.utc) -> date:
        """Calendar date of a naive-UTC timestamp as seen in `zone`"""
        aware = moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)
        return aware.astimezone(zone).date()

    @staticmethod
    def is_next_day(previous: date, current: date) -> bool:
        """True when `current` is exactly one calendar day after `previous`"""
        return current - previous == timedelta(days=1)

    @staticmethod
    def remaining_days(window_end: datetime, now: datetime) -> int:
        """Whole days left before the window closes, never negative"""
        seconds = (window_end - now).total_seconds()
        return max(0, math.ceil(seconds / 86400))
