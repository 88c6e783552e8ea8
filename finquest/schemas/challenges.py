from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime

from finquest.core.challenge_modes import ChallengeStatus, ChallengeType


class ChallengeResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    challenge_type: ChallengeType
    category: Optional[str] = None
    target_amount: float
    duration_days: int
    is_active: bool

    class Config:
        from_attributes = True


class JoinChallengeRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    started_at: Optional[datetime] = None


class EnrollmentResponse(BaseModel):
    id: str
    user_id: str
    challenge_id: str
    current_amount: float
    status: ChallengeStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    progress_data: Optional[Dict[str, Any]] = None
    progress_percentage: float = 0.0
    remaining_days: int = 0
    challenge: ChallengeResponse

    class Config:
        from_attributes = True


class EnrollmentListResponse(BaseModel):
    items: List[EnrollmentResponse]
    active: int
    completed: int
    failed: int


class CompletedChallengeResponse(BaseModel):
    enrollment_id: str
    challenge_id: str
    title: str
    current_amount: float
    completed_at: datetime


class TrackResponse(BaseModel):
    user_id: str
    newly_completed: List[CompletedChallengeResponse]
