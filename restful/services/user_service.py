"""
Service for the `user` entity: the ten user operations.

Dependencies (repository, password hasher, token service) are passed in at
construction; nothing here reads the environment. Domain errors raised by the
repository (`DuplicateFieldError`, `UserNotFoundError`, `InvalidUserIdError`)
propagate to the API layer, which maps them to response envelopes.
"""
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from restful.infrastructure.security.passwords import PasswordHasher
from restful.infrastructure.security.token_service import TokenService
from restful.repositories.user_repo import UserRepository


class UserService:
    def __init__(self, repo: UserRepository, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.repo = repo
        self.hasher = hasher
        self.tokens = tokens

    async def create_user(self, *, email: str, names: str, telephone: str, password: str) -> Dict[str, Any]:
        """Hash the password, insert the user and sign a token for it.

        Returns `{"user": ..., "token": ...}`.
        """
        # fail before writing anything when tokens cannot be signed
        self.tokens.ensure_configured()
        # argon2 is CPU bound; keep it off the event loop
        password_hash = await run_in_threadpool(self.hasher.hash, password)
        user = await self.repo.create({
            "email": email,
            "names": names,
            "telephone": telephone,
            "password_hash": password_hash,
        })
        token = self.tokens.create_access_token(user_id=user["id"])
        return {"user": user, "token": token}

    async def update_user(self, user_id: str, *, email: str, names: str, telephone: str) -> Dict[str, Any]:
        return await self.repo.update(user_id, {"email": email, "names": names, "telephone": telephone})

    async def me(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.get_by_id(user_id)

    async def all(self) -> List[Dict[str, Any]]:
        return await self.repo.list_all()

    async def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.repo.get_by_id(user_id)

    async def search(self, query: str) -> List[Dict[str, Any]]:
        return await self.repo.search_by_names(query)

    async def delete_user(self, user_id: str) -> Dict[str, Any]:
        return await self.repo.delete(user_id)

    async def delete_by_id(self, user_id: str) -> Dict[str, Any]:
        return await self.repo.delete(user_id)

    async def remove_avatar(self, user_id: str) -> Dict[str, Any]:
        return await self.repo.update(user_id, {"profile_picture": ""})

    async def update_avatar(self, user_id: str, url: str) -> Dict[str, Any]:
        return await self.repo.update(user_id, {"profile_picture": url})
