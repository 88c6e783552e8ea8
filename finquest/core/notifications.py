import logging
from typing import Iterable, Optional, Protocol

import httpx

from .config import settings
from .domain import ChallengeDefinition, CompletedChallenge, TrackedEnrollment

logger = logging.getLogger(__name__)


class CompletionNotifier(Protocol):
    async def on_challenge_completed(self, enrollment: TrackedEnrollment, challenge: ChallengeDefinition) -> None:
        ...


class LoggingNotifier:
    """Default notifier, just records the completion"""

    async def on_challenge_completed(self, enrollment: TrackedEnrollment, challenge: ChallengeDefinition) -> None:
        logger.info(f"🎉 User {enrollment.user_id} completed '{challenge.title}' ({enrollment.id})")


class WebhookNotifier:
    """POSTs each completion to an external URL (push service, feed, etc.)"""

    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self.client = client

    def build_payload(self, enrollment: TrackedEnrollment, challenge: ChallengeDefinition) -> dict:
        return {
            "event": "challenge.completed",
            "enrollment_id": enrollment.id,
            "user_id": enrollment.user_id,
            "challenge_id": challenge.id,
            "challenge_title": challenge.title,
            "challenge_type": challenge.challenge_type,
            "target_amount": challenge.target_amount,
        }

    async def on_challenge_completed(self, enrollment: TrackedEnrollment, challenge: ChallengeDefinition) -> None:
        payload = self.build_payload(enrollment, challenge)
        if self.client is not None:
            response = await self.client.post(self.url, json=payload, timeout=self.timeout)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()


def default_notifier() -> CompletionNotifier:
    if settings.NOTIFY_WEBHOOK_URL:
        return WebhookNotifier(settings.NOTIFY_WEBHOOK_URL, timeout=settings.NOTIFY_TIMEOUT_SECONDS)
    return LoggingNotifier()


async def dispatch_completions(notifier: CompletionNotifier, completed: Iterable[CompletedChallenge]) -> int:
    """
    Best-effort delivery of completion events. Delivery is at-least-once:
    concurrent passes may both report the same completion, de-duplicate on
    enrollment id if that matters. Returns how many notifications went out.
    """
    sent = 0
    for item in completed:
        try:
            await notifier.on_challenge_completed(item.enrollment, item.challenge)
            sent += 1
        except Exception as e:
            logger.error(f"Failed to send completion notice for {item.enrollment.id}: {e}")
    return sent
