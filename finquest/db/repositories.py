import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from finquest.core.challenge_modes import ALL_CATEGORIES, ChallengeStatus, ChallengeType
from finquest.core.domain import ChallengeDefinition, LedgerEntry, ProgressUpdate, TrackedEnrollment
from finquest.core.errors import (
    AlreadyEnrolledError,
    ChallengeNotFoundError,
    EnrollmentWriteError,
    ExpenseNotFoundError,
    LedgerQueryError,
)
from finquest.core.helpers.date_helpers import DateHelper
from finquest.db.models import Challenge, Enrollment, Expense

logger = logging.getLogger(__name__)


def _to_entry(expense: Expense) -> LedgerEntry:
    return LedgerEntry(
        amount=float(expense.amount),
        category=expense.category,
        expense_date=expense.expense_date,
        location_name=expense.location_name,
        location_lat=expense.location_lat,
        location_lng=expense.location_lng,
    )


def _to_definition(challenge: Challenge) -> ChallengeDefinition:
    return ChallengeDefinition(
        id=challenge.id,
        title=challenge.title,
        challenge_type=challenge.challenge_type,
        category=challenge.category,
        target_amount=float(challenge.target_amount),
        duration_days=int(challenge.duration_days),
    )


def _to_tracked(enrollment: Enrollment) -> TrackedEnrollment:
    return TrackedEnrollment(
        id=enrollment.id,
        user_id=enrollment.user_id,
        challenge_id=enrollment.challenge_id,
        current_amount=float(enrollment.current_amount or 0.0),
        status=ChallengeStatus(enrollment.status),
        started_at=enrollment.started_at,
        challenge=_to_definition(enrollment.challenge),
        progress_data=enrollment.progress_data,
    )


class LedgerRepository:
    """Read-only queries over a user's expenses"""

    def __init__(self, db: Session):
        self.db = db

    def list_entries(
        self,
        user_id: str,
        category: Optional[str] = None,
        date_range: Optional[Tuple[datetime, datetime]] = None,
    ) -> List[LedgerEntry]:
        """Entries for a user, optionally narrowed to a category and a [start, end) range"""
        query = select(Expense).where(Expense.user_id == user_id)

        if category and category != ALL_CATEGORIES:
            query = query.where(Expense.category == category)

        if date_range:
            start, end = date_range
            query = query.where(Expense.expense_date >= start, Expense.expense_date < end)

        return self._fetch(query)

    def list_entries_ordered(self, user_id: str) -> List[LedgerEntry]:
        query = (
            select(Expense)
            .where(Expense.user_id == user_id)
            .order_by(Expense.expense_date.asc())
        )
        return self._fetch(query)

    def list_geocoded_entries(self, user_id: str) -> List[LedgerEntry]:
        query = select(Expense).where(
            Expense.user_id == user_id,
            Expense.location_lat.isnot(None),
            Expense.location_lng.isnot(None),
        )
        return self._fetch(query)

    def _fetch(self, query) -> List[LedgerEntry]:
        try:
            return [_to_entry(e) for e in self.db.execute(query).scalars().all()]
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise LedgerQueryError(f"Expense query failed: {exc}") from exc

    # ==================== LEDGER WRITES ====================

    def add_expense(self, user_id: str, **fields) -> Expense:
        expense = Expense(user_id=user_id, **fields)
        self.db.add(expense)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete_expense(self, user_id: str, expense_id: str) -> None:
        expense = self.db.execute(
            select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
        ).scalar_one_or_none()
        if not expense:
            raise ExpenseNotFoundError(expense_id)
        self.db.delete(expense)
        self.db.commit()


class EnrollmentRepository:
    """Catalog and enrollment queries plus the progress writer"""

    def __init__(self, db: Session):
        self.db = db

    def list_active_enrollments(self, user_id: str, challenge_type: ChallengeType) -> List[TrackedEnrollment]:
        query = (
            select(Enrollment)
            .join(Enrollment.challenge)
            .options(joinedload(Enrollment.challenge))
            .where(
                Enrollment.user_id == user_id,
                Enrollment.status == ChallengeStatus.ACTIVE.value,
                Challenge.challenge_type == ChallengeType(challenge_type).value,
            )
        )
        try:
            return [_to_tracked(e) for e in self.db.execute(query).scalars().all()]
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise LedgerQueryError(f"Enrollment query failed: {exc}") from exc

    def update_enrollment(self, enrollment_id: str, progress: ProgressUpdate) -> bool:
        """
        Overwrite the derived fields of an active enrollment.
        The write only applies while the row is still active, so a terminal
        enrollment keeps its status, amount and completed_at. Returns True when
        a row was changed.
        """
        stmt = (
            update(Enrollment)
            .where(
                Enrollment.id == enrollment_id,
                Enrollment.status == ChallengeStatus.ACTIVE.value,
            )
            .values(**progress.as_values())
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise EnrollmentWriteError(f"Updating enrollment {enrollment_id} failed: {exc}") from exc

        return result.rowcount > 0

    # ==================== CATALOG / JOIN ====================

    def list_catalog(self, only_active: bool = True) -> List[Challenge]:
        query = select(Challenge).order_by(Challenge.challenge_type, Challenge.title)
        if only_active:
            query = query.where(Challenge.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def list_user_enrollments(self, user_id: str, status: Optional[str] = None) -> List[Enrollment]:
        query = (
            select(Enrollment)
            .options(joinedload(Enrollment.challenge))
            .where(Enrollment.user_id == user_id)
            .order_by(Enrollment.started_at.desc())
        )
        if status:
            query = query.where(Enrollment.status == status)
        return list(self.db.execute(query).scalars().all())

    def join_challenge(self, user_id: str, challenge_id: str, started_at: Optional[datetime] = None) -> Enrollment:
        """Create a fresh active enrollment; terminal ones are never reopened"""
        challenge = self.db.get(Challenge, challenge_id)
        if not challenge or not challenge.is_active:
            raise ChallengeNotFoundError(challenge_id)

        existing = self.db.execute(
            select(Enrollment.id).where(
                Enrollment.user_id == user_id,
                Enrollment.challenge_id == challenge_id,
                Enrollment.status == ChallengeStatus.ACTIVE.value,
            )
        ).first()
        if existing:
            raise AlreadyEnrolledError(user_id, challenge_id)

        enrollment = Enrollment(
            user_id=user_id,
            challenge_id=challenge_id,
            current_amount=0.0,
            status=ChallengeStatus.ACTIVE.value,
            started_at=DateHelper.to_utc_naive(started_at) if started_at else DateHelper.utcnow(),
        )
        self.db.add(enrollment)
        self.db.commit()
        self.db.refresh(enrollment)
        logger.info(f"User {user_id} joined challenge {challenge_id} as enrollment {enrollment.id}")
        return enrollment

    def status_counts(self, user_id: str) -> Dict[str, int]:
        counts = {status.value: 0 for status in ChallengeStatus}
        for enrollment in self.list_user_enrollments(user_id):
            counts[enrollment.status] = counts.get(enrollment.status, 0) + 1
        return counts
