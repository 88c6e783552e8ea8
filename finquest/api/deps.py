from finquest.core.challenge_engine import ChallengeEngine
from finquest.core.notifications import default_notifier
from finquest.db.session import SessionLocal


def get_challenge_engine() -> ChallengeEngine:
    return ChallengeEngine(SessionLocal, notifier=default_notifier())
