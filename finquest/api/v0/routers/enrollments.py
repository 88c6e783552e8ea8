from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from ....db.session import get_db
from ....db.models import Enrollment
from ....db.repositories import EnrollmentRepository
from ....core.challenge_engine import ChallengeEngine
from ....core.challenge_modes import ChallengeStatus
from ....core.helpers.date_helpers import DateHelper
from ....schemas.challenges import EnrollmentListResponse, TrackResponse
from ...deps import get_challenge_engine

router = APIRouter(prefix="/users/{user_id}/challenges", tags=["enrollments"])


def to_enrollment_response(enrollment: Enrollment) -> dict:
    challenge = enrollment.challenge
    target = challenge.target_amount
    progress = (enrollment.current_amount / target * 100) if target > 0 else 0
    _, window_end = DateHelper.challenge_window(enrollment.started_at, challenge.duration_days)

    return {
        "id": enrollment.id,
        "user_id": enrollment.user_id,
        "challenge_id": enrollment.challenge_id,
        "current_amount": enrollment.current_amount,
        "status": enrollment.status,
        "started_at": enrollment.started_at,
        "completed_at": enrollment.completed_at,
        "progress_data": enrollment.progress_data,
        "progress_percentage": min(100, progress),
        "remaining_days": DateHelper.remaining_days(window_end, DateHelper.utcnow()),
        "challenge": challenge,
    }


@router.get("", response_model=EnrollmentListResponse)
async def list_user_challenges(
    user_id: str,
    status: Optional[ChallengeStatus] = Query(None, description="Filter by active/completed/failed"),
    db: Session = Depends(get_db),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """Refresh progress, then list the user's enrollments"""
    await engine.track_all_challenges(user_id)

    repo = EnrollmentRepository(db)
    enrollments = repo.list_user_enrollments(user_id, status.value if status else None)
    counts = repo.status_counts(user_id)

    return {
        "items": [to_enrollment_response(e) for e in enrollments],
        "active": counts[ChallengeStatus.ACTIVE.value],
        "completed": counts[ChallengeStatus.COMPLETED.value],
        "failed": counts[ChallengeStatus.FAILED.value],
    }


@router.post("/track", response_model=TrackResponse)
async def track_user_challenges(
    user_id: str,
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """Run a reconciliation pass and report what it completed"""
    completed = await engine.track_all_challenges(user_id)

    return {
        "user_id": user_id,
        "newly_completed": [
            {
                "enrollment_id": c.enrollment.id,
                "challenge_id": c.challenge.id,
                "title": c.challenge.title,
                "current_amount": c.current_amount,
                "completed_at": c.completed_at,
            }
            for c in completed
        ],
    }
