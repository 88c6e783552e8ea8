"""
Pure progress rules shared by the trackers.

Nothing here touches storage: every function takes already-windowed ledger
entries and returns derived values, so the same inputs always give the same
outputs.
"""
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional

from .challenge_modes import ChallengeStatus
from .domain import LedgerEntry, ProgressUpdate
from .helpers.date_helpers import DateHelper
from .helpers.geo_helpers import GeoHelper


def resolve_status(goal_met: bool, window_end: datetime, now: datetime) -> ChallengeStatus:
    """Completion is checked before expiry"""
    if goal_met:
        return ChallengeStatus.COMPLETED
    if now >= window_end:
        return ChallengeStatus.FAILED
    return ChallengeStatus.ACTIVE


def build_update(
    enrollment_id: str,
    current_amount: float,
    goal_met: bool,
    window_end: datetime,
    now: datetime,
    progress_data: Optional[Dict[str, Any]] = None,
) -> ProgressUpdate:
    status = resolve_status(goal_met, window_end, now)
    return ProgressUpdate(
        enrollment_id=enrollment_id,
        current_amount=current_amount,
        status=status,
        completed_at=now if status is ChallengeStatus.COMPLETED else None,
        progress_data=progress_data,
    )


def filter_window(entries: Iterable[LedgerEntry], start: datetime, end: datetime) -> List[LedgerEntry]:
    return [e for e in entries if DateHelper.in_window(e.expense_date, start, end)]


# ==================== SPENDING ====================

def sum_amounts(entries: Iterable[LedgerEntry]) -> float:
    return float(sum(float(e.amount) for e in entries))


# ==================== LOGGING ====================

def longest_streak(days: Iterable[date]) -> int:
    """Length of the longest run of consecutive calendar days"""
    ordered = sorted(set(days))
    if not ordered:
        return 0

    best = current = 1
    for previous, day in zip(ordered, ordered[1:]):
        if DateHelper.is_next_day(previous, day):
            current += 1
            best = max(best, current)
        else:
            current = 1

    return best


def streak_length(entries: Iterable[LedgerEntry], zone: tzinfo = timezone.utc) -> int:
    return longest_streak(DateHelper.local_date(e.expense_date, zone) for e in entries)


def count_entries(entries: Iterable[LedgerEntry]) -> int:
    # same-day duplicates count individually
    return sum(1 for _ in entries)


# ==================== EXPLORATION ====================

def distinct_locations(entries: Iterable[LedgerEntry]) -> List[str]:
    """Distinct non-empty location names, in first-seen order"""
    return list(dict.fromkeys(e.location_name for e in entries if e.location_name))


def distinct_cities(entries: Iterable[LedgerEntry]) -> List[str]:
    cities = (GeoHelper.derive_city(e.location_name) for e in entries if e.location_name)
    return list(dict.fromkeys(city for city in cities if city))
