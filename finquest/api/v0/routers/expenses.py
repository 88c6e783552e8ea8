import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ....db.session import get_db
from ....db.repositories import LedgerRepository
from ....core.challenge_engine import ChallengeEngine
from ....core.errors import ExpenseNotFoundError
from ....core.helpers.date_helpers import DateHelper
from ....schemas.expense import ExpenseCreate, ExpenseResponse
from ...deps import get_challenge_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    user_id: str,
    expense_in: ExpenseCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    """Record an expense and refresh challenge progress afterwards"""
    fields = expense_in.model_dump()
    fields["expense_date"] = DateHelper.to_utc_naive(expense_in.expense_date) if expense_in.expense_date else DateHelper.utcnow()

    expense = LedgerRepository(db).add_expense(user_id, **fields)
    logger.info(f"Expense {expense.id} saved for user {user_id}")

    background_tasks.add_task(engine.track_all_challenges, user_id)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    user_id: str,
    expense_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    engine: ChallengeEngine = Depends(get_challenge_engine),
):
    try:
        LedgerRepository(db).delete_expense(user_id, expense_id)
    except ExpenseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    background_tasks.add_task(engine.track_all_challenges, user_id)
