"""
Mongo bootstrap: defines and applies the JSON-schema validator and indexes of
the `user` collection. Runs at application startup; a failure here is logged
and does not stop the app.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from restful.repositories.user_repo import COLLECTION as USER_COLL

_log = logging.getLogger("restful.mongo.bootstrap")

USER_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": [
        "email",
        "names",
        "telephone",
        "password_hash",
        "profile_picture",
        "created_at",
        "updated_at",
    ],
    "properties": {
        "email": {"bsonType": "string", "minLength": 3, "description": "lowercase"},
        "names": {"bsonType": "string"},
        "telephone": {"bsonType": "string"},
        "password_hash": {"bsonType": "string"},
        "profile_picture": {"bsonType": "string", "description": "URL or '' when unset"},
        "created_at": {"bsonType": "string", "minLength": 10},
        "updated_at": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

USER_INDEXES: List[Dict[str, Any]] = [
    {"keys": [("email", 1)], "unique": True, "name": "uniq_email"},
    {"keys": [("telephone", 1)], "unique": True, "name": "uniq_telephone"},
    {"keys": [("names", 1)], "name": "ix_names"},
]


async def _collmod_or_create(db: AsyncIOMotorDatabase, name: str, validator: Dict[str, Any] | None) -> None:
    try:
        if name not in await db.list_collection_names():
            if validator:
                await db.create_collection(name, validator={"$jsonSchema": validator})
            else:
                await db.create_collection(name)
        elif validator:
            await db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
    except PyMongoError as e:
        # Some deployments reject collMod without privileges; keep going without a strict validator.
        _log.warning("Could not apply validator on '%s': %s", name, e)


async def _ensure_indexes(db: AsyncIOMotorDatabase, name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = db[name]
    for ix in indexes:
        opts = dict(ix)
        keys = opts.pop("keys")
        try:
            await coll.create_index(keys, **opts)
        except PyMongoError as e:
            # e.g. pre-existing non-unique data
            _log.warning("Could not create index on '%s' (%s): %s", name, keys, e)


async def ensure_collections(db: AsyncIOMotorDatabase) -> None:
    """Guarantee the `user` collection, its validator and unique indexes."""
    await _collmod_or_create(db, USER_COLL, USER_VALIDATOR)
    await _ensure_indexes(db, USER_COLL, USER_INDEXES)
    _log.info("Collection '%s' ready", USER_COLL)
