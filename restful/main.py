"""FastAPI entry point (configures middlewares, exception handlers and routers)."""
import logging

from fastapi import FastAPI

from restful.api.router import api_router
from restful.core.config import Settings, settings
from restful.core.exceptions import register_exception_handlers
from restful.core.logging import setup_logging
from restful.core.middleware import add_middlewares
from restful.infrastructure.db.bootstrap import ensure_collections
from restful.infrastructure.db.mongo_async import close_async_client, get_async_db, ping

_log = logging.getLogger("restful.startup")


def create_app(cfg: Settings = settings) -> FastAPI:
    setup_logging(cfg.log_level)
    app = FastAPI(title=cfg.app_name)

    add_middlewares(app, cfg)
    register_exception_handlers(app)

    @app.on_event("startup")
    async def on_startup():
        if not cfg.jwt_configured:
            _log.warning("JWT_SECRET is not set; user creation and authenticated routes will fail")
        get_async_db(cfg)
        # Indexes enforce email/telephone uniqueness; a failure here must not block startup
        try:
            if await ping():
                await ensure_collections(get_async_db(cfg))
            else:
                _log.warning("Mongo not ready; skipping ensure_collections()")
        except Exception as e:
            _log.warning("ensure_collections() failed: %s", e)

    @app.on_event("shutdown")
    def on_shutdown():
        close_async_client()

    # Mount routers under the configured prefix
    app.include_router(api_router, prefix=cfg.api_prefix_normalized)
    return app


app = create_app()
