import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from finquest.core.config import settings
from finquest.db.base import Base
from finquest.db import models  # registers tables
from finquest.db.models import Challenge
from finquest.db.session import engine, SessionLocal

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGES = [
    {
        "title": "Food Budget Week",
        "description": "Keep food spending at or under 1000 for 7 days",
        "challenge_type": "spending",
        "category": "food",
        "target_amount": 1000,
        "duration_days": 7,
    },
    {
        "title": "Frugal Month",
        "description": "Keep total spending at or under 15000 for 30 days",
        "challenge_type": "spending",
        "category": "all",
        "target_amount": 15000,
        "duration_days": 30,
    },
    {
        "title": "7-Day Logging Streak",
        "description": "Record at least one expense every day for 7 days in a row",
        "challenge_type": "logging",
        "category": "streak",
        "target_amount": 7,
        "duration_days": 14,
    },
    {
        "title": "Diligent Bookkeeper",
        "description": "Record 30 expenses within 30 days",
        "challenge_type": "logging",
        "category": "count",
        "target_amount": 30,
        "duration_days": 30,
    },
    {
        "title": "Explorer",
        "description": "Spend at 10 different places within 30 days",
        "challenge_type": "exploration",
        "category": "locations",
        "target_amount": 10,
        "duration_days": 30,
    },
    {
        "title": "City Hopper",
        "description": "Spend in 3 different cities within 60 days",
        "challenge_type": "exploration",
        "category": "cities",
        "target_amount": 3,
        "duration_days": 60,
    },
]


def seed_challenges(db: Session) -> int:
    """Insert the default catalog when the table is empty"""
    if db.execute(select(Challenge.id)).first():
        logger.info("Challenge catalog already present, skipping seed")
        return 0

    for data in DEFAULT_CHALLENGES:
        db.add(Challenge(**data))
    db.commit()
    logger.info(f"Seeded {len(DEFAULT_CHALLENGES)} default challenges")
    return len(DEFAULT_CHALLENGES)


def init_db():
    Base.metadata.create_all(bind=engine)
    if settings.SEED_DEFAULT_CHALLENGES:
        db = SessionLocal()
        try:
            seed_challenges(db)
        finally:
            db.close()
