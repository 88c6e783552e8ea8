from enum import Enum
from typing import Optional


class ChallengeType(str, Enum):
    SPENDING = "spending"
    LOGGING = "logging"
    EXPLORATION = "exploration"


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class ChallengeMode(str, Enum):
    """Every supported (challenge_type, category) pair, plus an explicit unknown"""

    SPENDING_CATEGORY = "spending:category"
    SPENDING_ALL = "spending:all"
    LOGGING_STREAK = "logging:streak"
    LOGGING_COUNT = "logging:count"
    EXPLORATION_LOCATIONS = "exploration:locations"
    EXPLORATION_CITIES = "exploration:cities"
    UNKNOWN = "unknown"


ALL_CATEGORIES = "all"

_SUB_MODES = {
    (ChallengeType.LOGGING, "streak"): ChallengeMode.LOGGING_STREAK,
    (ChallengeType.LOGGING, "count"): ChallengeMode.LOGGING_COUNT,
    (ChallengeType.EXPLORATION, "locations"): ChallengeMode.EXPLORATION_LOCATIONS,
    (ChallengeType.EXPLORATION, "cities"): ChallengeMode.EXPLORATION_CITIES,
}


def resolve_mode(challenge_type: str, category: Optional[str]) -> ChallengeMode:
    """Map a catalog entry's type and category onto its tracking mode"""
    try:
        kind = ChallengeType(challenge_type)
    except ValueError:
        return ChallengeMode.UNKNOWN

    if kind is ChallengeType.SPENDING:
        # Any ledger category is valid, a missing one means the whole ledger
        if not category or category == ALL_CATEGORIES:
            return ChallengeMode.SPENDING_ALL
        return ChallengeMode.SPENDING_CATEGORY

    return _SUB_MODES.get((kind, category), ChallengeMode.UNKNOWN)
