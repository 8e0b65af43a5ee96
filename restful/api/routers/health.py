"""Health endpoints (no auth), typed and stable outputs."""
from fastapi import APIRouter, Depends, status

from restful.api.deps import get_settings
from restful.api.schemas.health import HealthOut, PingOut
from restful.core.config import Settings
from restful.infrastructure.db import mongo_async

router = APIRouter(tags=["Health"])  # no prefix to keep paths stable


@router.get("/ping", response_model=PingOut, summary="Basic ping")
def ping() -> PingOut:
    return PingOut(message="pong")


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthOut, summary="Basic health")
async def health(cfg: Settings = Depends(get_settings)) -> HealthOut:
    mongo_ok = await mongo_async.ping()
    return HealthOut(ok=mongo_ok and cfg.jwt_configured, mongo=mongo_ok, jwt_configured=cfg.jwt_configured)
