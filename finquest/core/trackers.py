import logging
from datetime import datetime, timezone, tzinfo
from typing import List, Optional

from sqlalchemy.orm import Session

from .challenge_modes import ChallengeMode, ChallengeStatus, ChallengeType
from .domain import CompletedChallenge, LedgerEntry, ProgressUpdate, TrackedEnrollment
from .errors import TrackingError
from .helpers.date_helpers import DateHelper
from . import progress
from finquest.db.repositories import EnrollmentRepository, LedgerRepository

logger = logging.getLogger(__name__)


class BaseTracker:
    """
    Recomputes every active enrollment of one challenge type for a user.

    `track()` is an error boundary: a failed query aborts this tracker's pass
    only, a failed write skips that one enrollment, and nothing is raised.
    """

    challenge_type: ChallengeType

    def __init__(
        self,
        db: Session,
        user_id: str,
        now: Optional[datetime] = None,
        zone: tzinfo = timezone.utc,
    ):
        self.db = db
        self.user_id = user_id
        self.now = DateHelper.to_utc_naive(now) if now else DateHelper.utcnow()
        self.zone = zone
        self.enrollments = EnrollmentRepository(db)
        self.ledger = LedgerRepository(db)

    def track(self) -> List[CompletedChallenge]:
        try:
            return self._track()
        except Exception as e:
            logger.error(
                f"Error tracking {self.challenge_type.value} challenges for user {self.user_id}: {e}",
                exc_info=True,
            )
            return []

    def _track(self) -> List[CompletedChallenge]:
        try:
            active = self.enrollments.list_active_enrollments(self.user_id, self.challenge_type)
            if not active:
                return []
            self.load_ledger()
        except TrackingError as e:
            logger.error(f"{self.challenge_type.value} tracking aborted for user {self.user_id}: {e}")
            return []

        completed: List[CompletedChallenge] = []
        for enrollment in active:
            try:
                update = self.evaluate(enrollment)
                if update is None:
                    continue
                applied = self.enrollments.update_enrollment(enrollment.id, update)
            except TrackingError as e:
                logger.error(f"Skipping enrollment {enrollment.id}: {e}")
                continue
            except Exception as e:
                logger.error(f"Skipping enrollment {enrollment.id} after unexpected error: {e}", exc_info=True)
                continue

            if applied and update.status is ChallengeStatus.COMPLETED:
                logger.info(f"Enrollment {enrollment.id} completed ({update.current_amount})")
                completed.append(CompletedChallenge(
                    enrollment=enrollment,
                    current_amount=update.current_amount,
                    completed_at=update.completed_at,
                ))
            elif applied and update.status is ChallengeStatus.FAILED:
                logger.info(f"Enrollment {enrollment.id} failed ({update.current_amount})")

        return completed

    def load_ledger(self) -> None:
        """Fetch whatever ledger data is shared by all enrollments of this pass"""

    def evaluate(self, enrollment: TrackedEnrollment) -> Optional[ProgressUpdate]:
        raise NotImplementedError

    def _unknown_mode(self, enrollment: TrackedEnrollment) -> None:
        logger.warning(
            f"Enrollment {enrollment.id}: no handler for "
            f"{enrollment.challenge.challenge_type}/{enrollment.challenge.category}, leaving it unchanged"
        )
        return None


class SpendingTracker(BaseTracker):
    """Budget ceilings: success means the window total stays at or under target"""

    challenge_type = ChallengeType.SPENDING

    def evaluate(self, enrollment: TrackedEnrollment) -> Optional[ProgressUpdate]:
        # resolve_mode maps every spending category to ALL or CATEGORY
        challenge = enrollment.challenge
        start, end = enrollment.window
        category = challenge.category if challenge.mode is ChallengeMode.SPENDING_CATEGORY else None
        entries = self.ledger.list_entries(self.user_id, category, (start, end))

        window_sum = progress.sum_amounts(entries)
        return progress.build_update(
            enrollment.id,
            window_sum,
            window_sum <= challenge.target_amount,
            end,
            self.now,
        )


class LoggingTracker(BaseTracker):
    """Engagement: consecutive-day streaks or raw entry counts"""

    challenge_type = ChallengeType.LOGGING

    def load_ledger(self) -> None:
        self.entries: List[LedgerEntry] = self.ledger.list_entries_ordered(self.user_id)

    def evaluate(self, enrollment: TrackedEnrollment) -> Optional[ProgressUpdate]:
        challenge = enrollment.challenge
        start, end = enrollment.window
        relevant = progress.filter_window(self.entries, start, end)

        if challenge.mode is ChallengeMode.LOGGING_STREAK:
            current = progress.streak_length(relevant, self.zone)
        elif challenge.mode is ChallengeMode.LOGGING_COUNT:
            current = progress.count_entries(relevant)
        else:
            return self._unknown_mode(enrollment)

        return progress.build_update(
            enrollment.id,
            float(current),
            current >= challenge.target_amount,
            end,
            self.now,
        )


class ExplorationTracker(BaseTracker):
    """Discovery: distinct places or derived cities among geocoded expenses"""

    challenge_type = ChallengeType.EXPLORATION

    def load_ledger(self) -> None:
        self.entries: List[LedgerEntry] = self.ledger.list_geocoded_entries(self.user_id)

    def evaluate(self, enrollment: TrackedEnrollment) -> Optional[ProgressUpdate]:
        challenge = enrollment.challenge
        start, end = enrollment.window
        relevant = progress.filter_window(self.entries, start, end)

        if challenge.mode is ChallengeMode.EXPLORATION_LOCATIONS:
            found = progress.distinct_locations(relevant)
            progress_data = {"locations": found}
        elif challenge.mode is ChallengeMode.EXPLORATION_CITIES:
            found = progress.distinct_cities(relevant)
            progress_data = {"cities": found}
        else:
            return self._unknown_mode(enrollment)

        return progress.build_update(
            enrollment.id,
            float(len(found)),
            len(found) >= challenge.target_amount,
            end,
            self.now,
            progress_data=progress_data,
        )


TRACKERS = (SpendingTracker, LoggingTracker, ExplorationTracker)
