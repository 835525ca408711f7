from datetime import datetime
from typing import Any, List, Optional

from app.db.repositories.record_repo import RecordRepository
from app.models.wholesale_batch import WholesaleBatch


class WholesaleRepository(RecordRepository[WholesaleBatch]):
    model = WholesaleBatch
    sortable_fields = ("date", "investment_amount", "boxes_purchased", "profit_per_box", "created_at")

    def filter_conditions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        min_investment: Optional[float] = None,
        max_investment: Optional[float] = None,
    ) -> List[Any]:
        conditions = self.date_conditions(start_date, end_date)
        if min_investment is not None:
            conditions.append(WholesaleBatch.investment_amount >= min_investment)
        if max_investment is not None:
            conditions.append(WholesaleBatch.investment_amount <= max_investment)
        return conditions
