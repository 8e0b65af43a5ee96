"""API router aggregator."""
from fastapi import APIRouter
from restful.api.routers import health, user

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(user.router)
