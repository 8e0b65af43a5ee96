"""
Reusable router dependencies (FastAPI Depends).

- Wires settings -> repository/hasher/token service -> UserService.
- Authentication: extracts and validates the Bearer access token and returns
  the caller identity.
- Keep this layer thin: no business logic.
"""
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException
from starlette.status import HTTP_401_UNAUTHORIZED

from restful.core.config import Settings, settings
from restful.infrastructure.db.mongo_async import get_async_db
from restful.infrastructure.security.passwords import PasswordHasher
from restful.infrastructure.security.token_service import TokenService
from restful.repositories.user_repo import UserRepository
from restful.services.user_service import UserService


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller, as established by the access token."""
    user_id: str


def get_settings() -> Settings:
    return settings


def get_user_repository(cfg: Settings = Depends(get_settings)) -> UserRepository:
    return UserRepository(get_async_db(cfg))


def get_token_service(cfg: Settings = Depends(get_settings)) -> TokenService:
    return TokenService.from_settings(cfg)


def get_password_hasher(cfg: Settings = Depends(get_settings)) -> PasswordHasher:
    return PasswordHasher.from_settings(cfg)


def get_user_service(
    repo: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    return UserService(repo, hasher, tokens)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> CallerIdentity:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = tokens.verify_access_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return CallerIdentity(user_id=str(user_id))
