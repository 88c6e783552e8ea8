from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .challenge_modes import ChallengeMode, ChallengeStatus, resolve_mode
from .helpers.date_helpers import DateHelper


@dataclass(frozen=True)
class LedgerEntry:
    """Read-only view of one expense row"""

    amount: float
    category: str
    expense_date: datetime
    location_name: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None


@dataclass(frozen=True)
class ChallengeDefinition:
    id: str
    title: str
    challenge_type: str
    category: Optional[str]
    target_amount: float
    duration_days: int

    @property
    def mode(self) -> ChallengeMode:
        return resolve_mode(self.challenge_type, self.category)


@dataclass(frozen=True)
class TrackedEnrollment:
    """An enrollment joined with its challenge definition"""

    id: str
    user_id: str
    challenge_id: str
    current_amount: float
    status: ChallengeStatus
    started_at: datetime
    challenge: ChallengeDefinition
    progress_data: Optional[Dict[str, Any]] = None

    @property
    def window(self) -> Tuple[datetime, datetime]:
        return DateHelper.challenge_window(self.started_at, self.challenge.duration_days)


@dataclass(frozen=True)
class ProgressUpdate:
    """Recomputed state for one enrollment, ready to be written back"""

    enrollment_id: str
    current_amount: float
    status: ChallengeStatus
    completed_at: Optional[datetime] = None
    progress_data: Optional[Dict[str, Any]] = field(default=None)

    def as_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "current_amount": self.current_amount,
            "status": self.status.value,
        }
        if self.status is ChallengeStatus.COMPLETED:
            values["completed_at"] = self.completed_at
        if self.progress_data is not None:
            values["progress_data"] = self.progress_data
        return values


@dataclass(frozen=True)
class CompletedChallenge:
    """An enrollment that this pass moved from active to completed"""

    enrollment: TrackedEnrollment
    current_amount: float
    completed_at: datetime

    @property
    def challenge(self) -> ChallengeDefinition:
        return self.enrollment.challenge
