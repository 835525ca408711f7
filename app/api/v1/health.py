import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Check if the record store is reachable."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        content = {"status": "not_ready", "database": "disconnected"}
        if settings.expose_error_details:
            content["error"] = str(e)
        return JSONResponse(status_code=503, content=content)

    return {"status": "ready", "database": "connected", "environment": settings.ENVIRONMENT}
