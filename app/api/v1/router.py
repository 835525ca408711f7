from fastapi import APIRouter

from app.api.v1 import health, expenses, body_weight, wholesale

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(body_weight.router, prefix="/body-weight", tags=["body-weight"])
api_router.include_router(wholesale.router, prefix="/wholesale", tags=["wholesale"])
