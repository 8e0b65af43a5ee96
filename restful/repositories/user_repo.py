"""
Repository for the `user` collection (async, Motor).

Driver errors are translated into the domain errors of `restful.core.exceptions`:
- `DuplicateKeyError` -> `DuplicateFieldError(field, value)`
- malformed ids -> `InvalidUserIdError`
- update/delete that match nothing -> `UserNotFoundError`
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from restful.core.exceptions import DuplicateFieldError, InvalidUserIdError, UserNotFoundError

COLLECTION = "user"

# "... index: uniq_email dup key: { email: \"a@b.c\" }"
_DUP_KEY_RE = re.compile(r"dup key: \{\s*\"?([A-Za-z_][\w.]*)\"?\s*:")
# legacy servers: "index: uniq_email dup key: { : ... }" or "index: db.user.$email_1 ..."
_INDEX_RE = re.compile(r"index: (?:[\w.]*\$)?(?:uniq_)?([A-Za-z_][\w.]*?)(?:_-?1)?\s")


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _oid(user_id: str) -> ObjectId:
    if not ObjectId.is_valid(str(user_id)):
        raise InvalidUserIdError(user_id)
    return ObjectId(str(user_id))


def _out(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Replace `_id` with a string `id`."""
    if doc is None:
        return None
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return data


def duplicate_field(exc: DuplicateKeyError) -> str:
    """Name of the field that violated a unique index.

    Uses the structured `keyPattern`/`keyValue` details when the server sends
    them, otherwise the `dup key` section of the error message.
    """
    details = exc.details or {}
    for key in ("keyPattern", "keyValue"):
        fields = details.get(key) or {}
        if fields:
            return next(iter(fields))
    errmsg = str(details.get("errmsg") or exc)
    for pattern in (_DUP_KEY_RE, _INDEX_RE):
        match = pattern.search(errmsg)
        if match:
            return match.group(1)
    return "field"


def names_filter(query: str) -> Dict[str, Any]:
    """Case-insensitive `contains` filter on `names` (query taken literally)."""
    return {"names": {"$regex": re.escape(query), "$options": "i"}}


class UserRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._coll = db[COLLECTION]

    @staticmethod
    def _conflict(exc: DuplicateKeyError, submitted: Dict[str, Any]) -> DuplicateFieldError:
        field = duplicate_field(exc)
        value = submitted.get(field)
        if value is None:
            value = ((exc.details or {}).get("keyValue") or {}).get(field)
        return DuplicateFieldError(field, value)

    async def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a user and return it (with `id`).
        - Lowercases `email`.
        - Defaults `profile_picture` to "".
        - Stamps `created_at`/`updated_at` in ISO-8601 UTC.
        """
        data = dict(doc)
        if data.get("email"):
            data["email"] = str(data["email"]).lower()
        data.setdefault("profile_picture", "")
        now = _now_iso()
        data.setdefault("created_at", now)
        data["updated_at"] = now
        try:
            res = await self._coll.insert_one(data)
        except DuplicateKeyError as e:
            raise self._conflict(e, doc) from e
        data["_id"] = res.inserted_id
        return _out(data)

    async def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return _out(await self._coll.find_one({"_id": _oid(user_id)}))

    async def list_all(self) -> List[Dict[str, Any]]:
        return [_out(d) async for d in self._coll.find({})]

    async def search_by_names(self, query: str) -> List[Dict[str, Any]]:
        return [_out(d) async for d in self._coll.find(names_filter(query))]

    async def update(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply `$set` with `fields` (None values skipped) and return the updated user."""
        set_ops = {k: v for k, v in fields.items() if v is not None}
        if set_ops.get("email"):
            set_ops["email"] = str(set_ops["email"]).lower()
        set_ops["updated_at"] = _now_iso()
        try:
            doc = await self._coll.find_one_and_update(
                {"_id": _oid(user_id)},
                {"$set": set_ops},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise self._conflict(e, fields) from e
        if doc is None:
            raise UserNotFoundError(user_id)
        return _out(doc)

    async def delete(self, user_id: str) -> Dict[str, Any]:
        """Delete a user and return the removed document."""
        doc = await self._coll.find_one_and_delete({"_id": _oid(user_id)})
        if doc is None:
            raise UserNotFoundError(user_id)
        return _out(doc)
