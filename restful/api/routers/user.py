"""
Endpoints for the `user` entity.

Every handler answers with the `{message, data}` envelope:
- duplicate email/telephone on create/update -> 400 "<Field> (<value>) already exists"
- unknown user -> 404, malformed id -> 400
- anything else -> 500 "Error occurred" (details only go to the log)
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from restful.api.deps import CallerIdentity, get_current_user, get_user_service
from restful.api.schemas.user import AvatarUpdate, UserCreate, UserUpdate, to_user_out
from restful.core.exceptions import DuplicateFieldError, InvalidUserIdError, UserNotFoundError
from restful.core.responses import ServerResponse
from restful.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

_log = logging.getLogger("restful.users")


def _failure(op: str, exc: Exception) -> JSONResponse:
    """Map domain errors to envelopes; log and hide everything else."""
    if isinstance(exc, DuplicateFieldError):
        return ServerResponse.error(exc.message, HTTP_400_BAD_REQUEST)
    if isinstance(exc, UserNotFoundError):
        return ServerResponse.error("User not found", HTTP_404_NOT_FOUND)
    if isinstance(exc, InvalidUserIdError):
        return ServerResponse.error("Invalid user id", HTTP_400_BAD_REQUEST)
    _log.exception("%s failed", op)
    return ServerResponse.error("Error occurred")


@router.post("", summary="Create user", description="Registers a user and returns it with an access token.")
async def create_user(payload: UserCreate, service: UserService = Depends(get_user_service)):
    try:
        res = await service.create_user(**payload.model_dump())
        return ServerResponse.created(
            "User created successfully",
            {"user": to_user_out(res["user"]), "token": res["token"]},
        )
    except Exception as e:
        return _failure("create_user", e)


@router.put("/me", summary="Update own user")
async def update_user(
    payload: UserUpdate,
    caller: CallerIdentity = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        user = await service.update_user(caller.user_id, **payload.model_dump())
        return ServerResponse.success("User updated successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("update_user", e)


@router.get("/me", summary="Own user")
async def me(caller: CallerIdentity = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    try:
        user = await service.me(caller.user_id)
        return ServerResponse.success("User retrieved successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("me", e)


@router.delete("/me", summary="Delete own user")
async def delete_user(caller: CallerIdentity = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    try:
        user = await service.delete_user(caller.user_id)
        return ServerResponse.success("User deleted successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("delete_user", e)


@router.patch("/me/avatar", summary="Set own avatar")
async def update_avatar(
    payload: AvatarUpdate,
    caller: CallerIdentity = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        user = await service.update_avatar(caller.user_id, payload.url)
        return ServerResponse.success("Avatar updated successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("update_avatar", e)


@router.patch("/me/avatar/remove", summary="Remove own avatar")
async def remove_avatar(caller: CallerIdentity = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    try:
        user = await service.remove_avatar(caller.user_id)
        return ServerResponse.success("Avatar removed successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("remove_avatar", e)


@router.get("", summary="List users")
async def all_users(service: UserService = Depends(get_user_service)):
    try:
        users = await service.all()
        return ServerResponse.success("Users retrieved successfully", {"users": [to_user_out(u) for u in users]})
    except Exception as e:
        return _failure("all", e)


@router.get("/search/{query}", summary="Search users by name", description="Case-insensitive substring match on `names`.")
async def search_user(query: str, service: UserService = Depends(get_user_service)):
    try:
        users = await service.search(query)
        return ServerResponse.success("Users retrieved successfully", {"users": [to_user_out(u) for u in users]})
    except Exception as e:
        return _failure("search_user", e)


@router.get("/{user_id}", summary="User by id")
async def get_by_id(user_id: str, service: UserService = Depends(get_user_service)):
    try:
        user = await service.get_by_id(user_id)
        return ServerResponse.success("User retrieved successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("get_by_id", e)


@router.delete("/{user_id}", summary="Delete user by id")
async def delete_by_id(user_id: str, service: UserService = Depends(get_user_service)):
    try:
        user = await service.delete_by_id(user_id)
        return ServerResponse.success("User deleted successfully", {"user": to_user_out(user)})
    except Exception as e:
        return _failure("delete_by_id", e)
