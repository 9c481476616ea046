from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from database import get_db
from errors import ApiError
from security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)

USER_PROJECTION = {"password": 0, "refreshToken": 0}


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    """Resolve the caller from the accessToken cookie or a Bearer header."""
    token = request.cookies.get("accessToken")
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise ApiError(401, "Unauthorized request")

    claims = decode_access_token(token)
    user_id = claims.get("_id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise ApiError(401, "Invalid access token")

    user = db["user"].find_one({"_id": ObjectId(user_id)}, USER_PROJECTION)
    if not user:
        raise ApiError(401, "Invalid access token")
    return user
