import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

import jwt
from passlib.context import CryptContext
from pymongo.database import Database

from database import objid, touch
from errors import ApiError
from settings import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


def is_password_correct(user: Mapping[str, Any], password: str) -> bool:
    return verify_password(password, user.get("password") or "")


def _sign(claims: Dict[str, Any], secret: str, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
        # Two tokens minted in the same second must still differ
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, secret: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise ApiError(401, "Token has expired")
    except jwt.InvalidTokenError:
        raise ApiError(401, "Invalid token")


def generate_access_token(user: Mapping[str, Any]) -> str:
    claims = {
        "_id": str(user["_id"]),
        "username": user.get("username"),
        "email": user.get("email"),
        "fullname": user.get("fullname"),
    }
    return _sign(claims, settings.access_token_secret, settings.access_token_expiry)


def generate_refresh_token(user: Mapping[str, Any]) -> str:
    return _sign({"_id": str(user["_id"])}, settings.refresh_token_secret, settings.refresh_token_expiry)


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.access_token_secret)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return _decode(token, settings.refresh_token_secret)


def generate_access_and_refresh_tokens(
    db: Database,
    user_id: Any,
    expected_refresh_token: Optional[str] = None,
) -> Tuple[str, str]:
    """Issue a token pair and store the refresh token on the user record.

    The stored refresh token is overwritten, so only one session per user
    can refresh at a time. With ``expected_refresh_token`` the overwrite only
    happens while that token is still the stored one, so a refresh token can
    be exchanged once.
    """
    user = db["user"].find_one({"_id": objid(user_id)})
    if not user:
        raise ApiError(404, "User does not exist")

    access_token = generate_access_token(user)
    refresh_token = generate_refresh_token(user)

    query = {"_id": user["_id"]}
    if expected_refresh_token is not None:
        query["refreshToken"] = expected_refresh_token
    result = db["user"].update_one(query, {"$set": touch({"refreshToken": refresh_token})})
    if result.matched_count == 0:
        if expected_refresh_token is None:
            raise ApiError(404, "User does not exist")
        raise ApiError(401, "Refresh token is expired or used")
    return access_token, refresh_token
