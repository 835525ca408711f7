import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.exceptions import (
    MalformedIdError,
    RecordValidationError,
    ResourceNotFoundError,
)
from app.api.v1.router import api_router
from app.schemas.common import ErrorResponse
from app.db.session import init_db, dispose_db

settings = get_settings()

# Configure logging - suppress noisy third-party loggers
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

# Silence noisy third-party libraries
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    await init_db()
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    await dispose_db()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="""
## MySphere API

Personal tracking API for expenses, body weight and wholesale batches.

### Features
- **Expenses**: Record spending with categories, payment types and recurrence
- **Body Weight**: Log weight and body composition measurements
- **Wholesale**: Track batch investments and potential profit
- **Analytics**: Period summaries, trends, statistics and profit tips
""",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "expenses", "description": "Expense records and analytics"},
        {"name": "body-weight", "description": "Body weight entries and analytics"},
        {"name": "wholesale", "description": "Wholesale batches and analytics"},
        {"name": "health", "description": "Health checks"},
    ],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, headers=None, **extra) -> JSONResponse:
    body = ErrorResponse(message=message, **extra)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


# Exception handlers
@app.exception_handler(RecordValidationError)
async def record_validation_exception_handler(
    request: Request, exc: RecordValidationError
):
    return error_response(400, exc.message, errors=exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
):
    """Report schema violations as 400 with one entry per offending field."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})

    return error_response(400, "Validation failed", errors=errors)


@app.exception_handler(MalformedIdError)
async def malformed_id_exception_handler(request: Request, exc: MalformedIdError):
    return error_response(400, exc.message)


@app.exception_handler(ResourceNotFoundError)
async def not_found_exception_handler(request: Request, exc: ResourceNotFoundError):
    return error_response(404, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP errors raised by routing with the same envelope."""
    if exc.status_code == 404:
        message = "Route not found"
    else:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error occurred")

    # Include the underlying error outside production
    error = str(exc) if settings.expose_error_details else None
    return error_response(500, "Something went wrong!", error=error)


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# Root health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}


@app.get("/")
async def root():
    return {
        "success": True,
        "message": f"{settings.APP_NAME} is running",
        "version": app.version,
    }
