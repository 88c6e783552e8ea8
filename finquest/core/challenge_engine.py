import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Set, Type

from sqlalchemy.orm import Session

from .config import settings
from .domain import CompletedChallenge
from .helpers.date_helpers import DateHelper
from .notifications import CompletionNotifier, dispatch_completions
from .trackers import TRACKERS, BaseTracker

logger = logging.getLogger(__name__)

# Keeps scheduled deliveries alive until they finish
_pending_deliveries: Set[asyncio.Task] = set()


class ChallengeEngine:
    """
    Entry point for challenge reconciliation.

    Each call fully recomputes every active enrollment of a user from the
    ledger, so it is safe to invoke repeatedly and from several places
    (listing challenges, after an expense is added, edited or deleted).
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        notifier: Optional[CompletionNotifier] = None,
        timezone_name: Optional[str] = None,
        trackers: Sequence[Type[BaseTracker]] = TRACKERS,
    ):
        self.session_factory = session_factory
        self.notifier = notifier
        self.zone = DateHelper.get_zone(timezone_name or settings.TRACKING_TIMEZONE)
        self.trackers = tuple(trackers)
        self._deliveries: Set[asyncio.Task] = set()

    def _run_tracker(self, tracker_cls: Type[BaseTracker], user_id: str, now: datetime) -> List[CompletedChallenge]:
        # Sessions are not thread safe, every tracker gets its own
        db = self.session_factory()
        try:
            return tracker_cls(db, user_id, now=now, zone=self.zone).track()
        finally:
            db.close()

    async def track_all_challenges(self, user_id: str, now: Optional[datetime] = None) -> List[CompletedChallenge]:
        """Run all trackers concurrently and return the newly completed enrollments"""
        now = DateHelper.to_utc_naive(now) if now else DateHelper.utcnow()

        results = await asyncio.gather(
            *(asyncio.to_thread(self._run_tracker, tracker_cls, user_id, now) for tracker_cls in self.trackers),
            return_exceptions=True,
        )

        completed: List[CompletedChallenge] = []
        for tracker_cls, result in zip(self.trackers, results):
            if isinstance(result, BaseException):
                logger.error(f"{tracker_cls.__name__} crashed for user {user_id}: {result}")
                continue
            completed.extend(result)

        if completed and self.notifier is not None:
            self._schedule_delivery(completed)

        return completed

    def _schedule_delivery(self, completed: List[CompletedChallenge]) -> None:
        """Send completion notices without making the caller wait for them"""
        task = asyncio.create_task(dispatch_completions(self.notifier, completed))
        _pending_deliveries.add(task)
        self._deliveries.add(task)
        task.add_done_callback(_pending_deliveries.discard)
        task.add_done_callback(self._deliveries.discard)

    async def wait_for_notifications(self) -> None:
        """Block until every delivery scheduled by this engine has finished"""
        if self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    def track_all_challenges_sync(self, user_id: str, now: Optional[datetime] = None) -> List[CompletedChallenge]:
        """Blocking variant for scripts and threads without an event loop"""
        async def run() -> List[CompletedChallenge]:
            completed = await self.track_all_challenges(user_id, now=now)
            # the event loop closes on return, let deliveries finish first
            await self.wait_for_notifications()
            return completed

        return asyncio.run(run())
