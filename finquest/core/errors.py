class TrackingError(Exception):
    """Base class for challenge tracking failures"""


class LedgerQueryError(TrackingError):
    """Reading expenses or enrollments from storage failed"""


class EnrollmentWriteError(TrackingError):
    """Applying recomputed progress to an enrollment failed"""


class ChallengeNotFoundError(TrackingError):
    def __init__(self, challenge_id: str):
        super().__init__(f"Challenge {challenge_id} not found or not open for enrollment")
        self.challenge_id = challenge_id


class AlreadyEnrolledError(TrackingError):
    def __init__(self, user_id: str, challenge_id: str):
        super().__init__(f"User {user_id} already has an active enrollment in {challenge_id}")
        self.user_id = user_id
        self.challenge_id = challenge_id


class ExpenseNotFoundError(TrackingError):
    def __init__(self, expense_id: str):
        super().__init__(f"Expense {expense_id} not found")
        self.expense_id = expense_id
