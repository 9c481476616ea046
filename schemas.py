"""
Database Schemas for the PlayApp backend

Each Pydantic model maps to a MongoDB collection. The collection name is the lowercase of the class name.
Field aliases are the names stored in MongoDB and sent over the wire.

Collections:
- User -> user
- Video -> video
- Subscription -> subscription
"""

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError, field_validator

SECRET_USER_FIELDS = ("password", "refreshToken")

_email_adapter = TypeAdapter(EmailStr)


class _Record(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class User(_Record):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    fullname: str = Field(..., min_length=1)
    avatar: str = Field(..., description="Hosted avatar URL")
    coverimage: str = Field("", description="Hosted cover image URL")
    watch_history: Optional[ObjectId] = Field(None, alias="watchHistory")
    password: str = Field(..., description="Bcrypt hash, never the plaintext")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    @field_validator("username", "email")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_identifier(v)

    @field_validator("fullname")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class Video(_Record):
    videofile: str = Field(..., description="Hosted video file URL")
    thumbnail: str = Field(..., description="Hosted thumbnail URL")
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration: float = Field(..., ge=0, description="Duration in seconds")
    views: int = Field(0, ge=0)
    is_published: bool = Field(True, alias="isPublished")
    owner: ObjectId

    @field_validator("description")
    @classmethod
    def _trim(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class Subscription(_Record):
    subscriber: ObjectId = Field(..., description="The user who is subscribing")
    channel: ObjectId = Field(..., description="The user being subscribed to")


# -------------------- Request payloads --------------------
# Fields are optional so that missing values surface as 400s from the handlers.
class LoginRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(None, alias="refreshToken")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: Optional[str] = Field(None, alias="oldPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class UpdateAccountRequest(BaseModel):
    fullname: Optional[str] = None
    email: Optional[EmailStr] = None


# -------------------- Helpers --------------------
def normalize_identifier(value: str) -> str:
    return value.strip().lower()


def is_valid_email(value: str) -> bool:
    """Same check UpdateAccountRequest applies through EmailStr."""
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def to_str_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    d = {**doc}
    if d.get("_id"):
        d["id"] = str(d.pop("_id"))
    for k, v in list(d.items()):
        if isinstance(v, ObjectId):
            d[k] = str(v)
        elif isinstance(v, datetime):
            d[k] = v.isoformat()
    return d


def sanitize_user(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """User view with the password hash and refresh token removed."""
    if not doc:
        return doc
    return to_str_id({k: v for k, v in doc.items() if k not in SECRET_USER_FIELDS})
