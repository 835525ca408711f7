from app.models.expense import Expense
from app.models.body_weight import BodyWeight
from app.models.wholesale_batch import WholesaleBatch
from app.models.enums import (
    Currency,
    PaymentType,
    ExpenseCategory,
    RecurringType,
    WeightUnit,
)

__all__ = [
    "Expense",
    "BodyWeight",
    "WholesaleBatch",
    "Currency",
    "PaymentType",
    "ExpenseCategory",
    "RecurringType",
    "WeightUnit",
]
