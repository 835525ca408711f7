import uuid
from math import ceil
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import MalformedIdError
from app.db.session import async_session_maker
from app.schemas.common import Pagination


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def validate_record_id(record_id: str, kind: str = "record") -> str:
    """Reject ids that are not UUIDs before querying the store."""
    try:
        uuid.UUID(record_id)
    except (ValueError, AttributeError, TypeError):
        raise MalformedIdError(f"Invalid {kind} ID", details={"id": record_id})
    return record_id


def build_pagination(page: int, page_size: int, total: int) -> Pagination:
    total_pages = ceil(total / page_size) if total > 0 else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=page_size,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
