from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select, func, and_, true
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class RecordRepository(Generic[ModelT]):
    """Shared store operations for the date-stamped record tables.

    Subclasses set ``model`` and ``sortable_fields`` and add their own list
    filters.
    """

    model: Type[ModelT]
    sortable_fields: Sequence[str] = ("date",)
    default_sort = "date"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, record_id: str) -> Optional[ModelT]:
        """Get record by ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == record_id)
        )
        return result.scalar_one_or_none()

    def _order_by(self, sort_by: Optional[str], sort_order: str):
        field = sort_by if sort_by in self.sortable_fields else self.default_sort
        column = getattr(self.model, field)
        primary = column.asc() if sort_order == "asc" else column.desc()
        return [primary, self.model.created_at.desc()]

    async def paginate(
        self,
        conditions: List[Any],
        page: int = 1,
        page_size: int = 10,
        sort_by: Optional[str] = None,
        sort_order: str = "desc",
    ) -> tuple[List[ModelT], int]:
        """Get one page of records matching the conditions, plus the total count."""
        where = and_(*conditions) if conditions else true()

        count_result = await self.db.execute(
            select(func.count(self.model.id)).where(where)
        )
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        result = await self.db.execute(
            select(self.model)
            .where(where)
            .order_by(*self._order_by(sort_by, sort_order))
            .offset(offset)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    def date_conditions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Any]:
        conditions = []
        if start_date is not None:
            conditions.append(self.model.date >= start_date)
        if end_date is not None:
            conditions.append(self.model.date <= end_date)
        return conditions

    async def find_in_range(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[ModelT]:
        """All records whose date falls in [start_date, end_date], oldest first.

        Either bound may be None for an open-ended range.
        """
        query = select(self.model).order_by(self.model.date.asc(), self.model.created_at.asc())
        conditions = self.date_conditions(start_date, end_date)
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def recent(
        self,
        limit: int,
        since: Optional[datetime] = None,
    ) -> List[ModelT]:
        """Newest records first."""
        query = select(self.model).order_by(self.model.date.desc(), self.model.created_at.desc())
        if since is not None:
            query = query.where(self.model.date >= since)
        result = await self.db.execute(query.limit(limit))
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> ModelT:
        """Create a new record."""
        record = self.model(**fields)
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def update(self, record: ModelT, fields: Dict[str, Any]) -> ModelT:
        """Apply a partial update to an existing record."""
        for name, value in fields.items():
            setattr(record, name, value)

        await self.db.flush()
        await self.db.refresh(record)
        return record

    async def delete(self, record: ModelT) -> None:
        await self.db.delete(record)
        await self.db.flush()
