from datetime import datetime, timedelta

USER_ID = "user-1"
DAY0 = datetime(2026, 3, 1, 9, 0, 0)


def day(n: int, hour: int = 12) -> datetime:
    """Timestamp on the n-th day after DAY0's calendar date"""
    return DAY0.replace(hour=hour) + timedelta(days=n)
