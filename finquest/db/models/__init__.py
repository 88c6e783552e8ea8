from .challenges import Challenge, Enrollment
from .expense import Expense

__all__ = ["Challenge", "Enrollment", "Expense"]
