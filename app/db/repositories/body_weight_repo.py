from datetime import datetime
from typing import Any, List, Optional

from app.db.repositories.record_repo import RecordRepository
from app.models.body_weight import BodyWeight


class BodyWeightRepository(RecordRepository[BodyWeight]):
    model = BodyWeight
    sortable_fields = ("date", "weight", "body_fat_percentage", "muscle_mass", "bmi", "created_at")

    def filter_conditions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        unit: Optional[str] = None,
    ) -> List[Any]:
        conditions = self.date_conditions(start_date, end_date)
        if unit:
            conditions.append(BodyWeight.unit == unit)
        return conditions
