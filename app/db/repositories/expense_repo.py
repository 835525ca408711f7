from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import or_, func

from app.db.repositories.record_repo import RecordRepository
from app.models.expense import Expense


def escape_like(term: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ExpenseRepository(RecordRepository[Expense]):
    model = Expense
    sortable_fields = ("date", "amount", "title", "category", "payment_type", "created_at")

    def filter_conditions(
        self,
        category: Optional[str] = None,
        payment_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> List[Any]:
        conditions = self.date_conditions(start_date, end_date)

        if category:
            conditions.append(Expense.category == category)
        if payment_type:
            conditions.append(Expense.payment_type == payment_type)
        if search:
            pattern = f"%{escape_like(search.lower())}%"
            conditions.append(
                or_(
                    func.lower(Expense.title).like(pattern, escape="\\"),
                    func.lower(Expense.description).like(pattern, escape="\\"),
                )
            )

        return conditions
