"""Asynchronous MongoDB client (Motor).

A single client/database is built lazily and shared by every request.
"""
from __future__ import annotations

import logging
from typing import Optional

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from restful.core.config import Settings, settings as default_settings

_log = logging.getLogger("restful.mongo.async")

_aclient: Optional[AsyncIOMotorClient] = None
_adb: Optional[AsyncIOMotorDatabase] = None


def _build_async_client(cfg: Settings) -> AsyncIOMotorClient:
    uri = cfg.mongo_uri
    kwargs = dict(serverSelectionTimeoutMS=cfg.mongo_server_selection_timeout_ms)
    if uri.startswith("mongodb+srv://"):
        kwargs["tlsCAFile"] = certifi.where()
    elif cfg.mongo_tls:
        kwargs["tls"] = True
        kwargs["tlsCAFile"] = certifi.where()
        if cfg.mongo_tls_insecure:
            kwargs["tlsAllowInvalidCertificates"] = True
        if cfg.mongo_tls_allow_invalid_hostnames:
            kwargs["tlsAllowInvalidHostnames"] = True
    return AsyncIOMotorClient(uri, **kwargs)


def get_async_db(cfg: Settings | None = None) -> AsyncIOMotorDatabase:
    """Return the async DB; lazily initializes a single client/database."""
    global _aclient, _adb
    if _adb is None:
        cfg = cfg or default_settings
        _aclient = _aclient or _build_async_client(cfg)
        _adb = _aclient[cfg.mongo_db]
        _log.info("Motor ready (db=%s)", cfg.mongo_db)
    return _adb


async def ping() -> bool:
    """True when the server answers `ping`; never raises."""
    try:
        await get_async_db().command("ping")
        return True
    except Exception as e:
        _log.warning("Mongo ping failed: %s", e)
        return False


def close_async_client() -> None:
    global _aclient, _adb
    if _aclient is not None:
        _aclient.close()
    _aclient = None
    _adb = None
