"""
Pydantic schemas for the `user` collection.

Key rules:
- snake_case fields.
- `email` is validated here but kept as submitted; the repository stores it
  in lowercase, and conflict messages echo the submitted value.
- `password_hash` never leaves the API (`UserOut` omits it).
- `profile_picture` is a URL, or "" when the user has no avatar.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email


def _check_email(v: str) -> str:
    # validate_email returns a normalized address; keep the raw one
    validate_email(v)
    return v


class UserCreate(BaseModel):
    email: str
    names: str = Field(min_length=1)
    telephone: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return _check_email(v)


class UserUpdate(BaseModel):
    """
    Partial update of the caller's own record.
    Fields left out (None) keep their stored value.
    """
    email: Optional[str] = None
    names: Optional[str] = Field(default=None, min_length=1)
    telephone: Optional[str] = Field(default=None, min_length=1)

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v) if v is not None else None


class AvatarUpdate(BaseModel):
    url: str = Field(min_length=1)


class UserOut(BaseModel):
    """Public user payload (no secrets)."""
    id: str
    email: str
    names: str
    telephone: str
    profile_picture: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def to_user_out(doc: Optional[dict]) -> Optional[dict]:
    """Serialize a repository document through `UserOut` (drops `password_hash`)."""
    if doc is None:
        return None
    return UserOut.model_validate(doc).model_dump()
