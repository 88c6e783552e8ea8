from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from ....db.session import get_db
from ....db.repositories import EnrollmentRepository
from ....core.errors import AlreadyEnrolledError, ChallengeNotFoundError
from ....schemas.challenges import ChallengeResponse, EnrollmentResponse, JoinChallengeRequest
from .enrollments import to_enrollment_response

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.get("", response_model=List[ChallengeResponse])
async def list_challenges(db: Session = Depends(get_db)):
    """Challenges currently open for enrollment"""
    return EnrollmentRepository(db).list_catalog(only_active=True)


@router.post("/{challenge_id}/join", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def join_challenge(
    challenge_id: str,
    request: JoinChallengeRequest,
    db: Session = Depends(get_db),
):
    """Start a new enrollment for a user"""
    repo = EnrollmentRepository(db)
    try:
        enrollment = repo.join_challenge(request.user_id, challenge_id, started_at=request.started_at)
    except ChallengeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return to_enrollment_response(enrollment)
