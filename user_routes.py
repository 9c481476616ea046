import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from pymongo.database import Database

import media
from auth import USER_PROJECTION, get_current_user
from database import create_document, get_db, touch
from errors import ApiError, api_response
from schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    UpdateAccountRequest,
    User,
    is_valid_email,
    normalize_identifier,
    sanitize_user,
)
from security import (
    decode_refresh_token,
    generate_access_and_refresh_tokens,
    hash_password,
    is_password_correct,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

COOKIE_OPTIONS = {"httponly": True, "secure": True}


# -------------------- Helpers --------------------
def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    response.set_cookie("accessToken", access_token, **COOKIE_OPTIONS)
    response.set_cookie("refreshToken", refresh_token, **COOKIE_OPTIONS)


def _clear_auth_cookies(response: Response) -> None:
    response.delete_cookie("accessToken", **COOKIE_OPTIONS)
    response.delete_cookie("refreshToken", **COOKIE_OPTIONS)


def _has_file(file: Optional[UploadFile]) -> bool:
    return file is not None and bool(file.filename)


def _find_user(db: Database, user_id: Any) -> Optional[Dict[str, Any]]:
    return db["user"].find_one({"_id": user_id}, USER_PROJECTION)


def _replace_user_image(db: Database, current_user: Dict[str, Any], field: str, file: Optional[UploadFile]) -> dict:
    label = "Avatar" if field == "avatar" else "Cover image"
    if not _has_file(file):
        raise ApiError(400, f"{label} file is missing")

    uploaded = media.upload_on_cloudinary(media.save_upload(file))
    if not uploaded or not uploaded.get("url"):
        raise ApiError(400, f"Error while uploading {label.lower()}")

    db["user"].update_one({"_id": current_user["_id"]}, {"$set": touch({field: uploaded["url"]})})
    return api_response(200, sanitize_user(_find_user(db, current_user["_id"])), f"{label} updated successfully")


# -------------------- Auth --------------------
@router.post("/register", status_code=201)
def register_user(
    fullname: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    coverimage: Optional[UploadFile] = File(None),
    db: Database = Depends(get_db),
):
    if any(not (field or "").strip() for field in (fullname, email, username, password)):
        raise ApiError(400, "All fields are required")

    username = normalize_identifier(username)
    email = normalize_identifier(email)
    if not is_valid_email(email):
        raise ApiError(400, "Invalid email address")

    if db["user"].find_one({"$or": [{"username": username}, {"email": email}]}):
        raise ApiError(409, "User already exists with this username or email")

    if not _has_file(avatar):
        raise ApiError(400, "Avatar is required")

    avatar_upload = media.upload_on_cloudinary(media.save_upload(avatar))
    if not avatar_upload:
        raise ApiError(500, "Could not upload avatar. Please try again later")

    # A failed cover upload leaves the avatar already stored remotely
    cover_upload = None
    if _has_file(coverimage):
        cover_upload = media.upload_on_cloudinary(media.save_upload(coverimage))

    record = User(
        fullname=fullname,
        email=email,
        username=username,
        password=hash_password(password),
        avatar=avatar_upload["url"],
        coverimage=(cover_upload or {}).get("url") or "",
    )
    user = create_document(db, "user", record.to_document())

    created_user = _find_user(db, user["_id"])
    if not created_user:
        raise ApiError(500, "User was not created. Please try again later")

    logger.info("Registered user %s", username)
    return api_response(201, sanitize_user(created_user), "User created successfully")


@router.post("/login")
def login_user(payload: LoginRequest, response: Response, db: Database = Depends(get_db)):
    if not payload.username and not payload.email:
        raise ApiError(400, "Username or email is required")
    if not payload.password:
        raise ApiError(400, "Password is required")

    conditions = []
    if payload.username:
        conditions.append({"username": normalize_identifier(payload.username)})
    if payload.email:
        conditions.append({"email": normalize_identifier(payload.email)})

    user = db["user"].find_one({"$or": conditions})
    if not user:
        raise ApiError(404, "User does not exist")

    if not is_password_correct(user, payload.password):
        logger.warning("Failed login attempt for user %s", user["username"])
        raise ApiError(401, "Invalid user credentials")

    access_token, refresh_token = generate_access_and_refresh_tokens(db, user["_id"])
    _set_auth_cookies(response, access_token, refresh_token)
    return api_response(
        200,
        {
            "user": sanitize_user(_find_user(db, user["_id"])),
            "accessToken": access_token,
            "refreshToken": refresh_token,
        },
        "User logged in successfully",
    )


@router.post("/logout")
def logout_user(
    response: Response,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    db["user"].update_one(
        {"_id": current_user["_id"]},
        {"$unset": {"refreshToken": 1}, "$set": touch({})},
    )
    _clear_auth_cookies(response)
    return api_response(200, {}, "User logged out")


@router.post("/refresh-token")
def refresh_access_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    db: Database = Depends(get_db),
):
    incoming = request.cookies.get("refreshToken") or (payload.refresh_token if payload else None)
    if not incoming:
        raise ApiError(401, "Unauthorized request")

    claims = decode_refresh_token(incoming)
    user_id = claims.get("_id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise ApiError(401, "Invalid refresh token")

    user = db["user"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise ApiError(404, "User does not exist")

    if incoming != user.get("refreshToken"):
        raise ApiError(401, "Refresh token is expired or used")

    access_token, refresh_token = generate_access_and_refresh_tokens(db, user["_id"], expected_refresh_token=incoming)
    _set_auth_cookies(response, access_token, refresh_token)
    return api_response(
        200,
        {"accessToken": access_token, "refreshToken": refresh_token},
        "Access token refreshed",
    )


# -------------------- Profile --------------------
@router.get("/current-user")
def get_current_user_profile(current_user: Dict[str, Any] = Depends(get_current_user)):
    return api_response(200, sanitize_user(current_user), "Current user fetched successfully")


@router.patch("/change-password")
def change_current_password(
    payload: ChangePasswordRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    if not payload.old_password or not payload.new_password:
        raise ApiError(400, "Old and new password are required")

    user = db["user"].find_one({"_id": current_user["_id"]})
    if not user:
        raise ApiError(404, "User does not exist")
    if not is_password_correct(user, payload.old_password):
        raise ApiError(401, "Invalid old password")

    db["user"].update_one(
        {"_id": user["_id"]},
        {"$set": touch({"password": hash_password(payload.new_password)})},
    )
    return api_response(200, sanitize_user(_find_user(db, user["_id"])), "Password changed successfully")


@router.patch("/update-account")
def update_account_details(
    payload: UpdateAccountRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    fullname = (payload.fullname or "").strip()
    email = normalize_identifier(payload.email or "")
    if not fullname or not email:
        raise ApiError(400, "All fields are required")

    if db["user"].find_one({"email": email, "_id": {"$ne": current_user["_id"]}}):
        raise ApiError(409, "Email is already in use")

    db["user"].update_one(
        {"_id": current_user["_id"]},
        {"$set": touch({"fullname": fullname, "email": email})},
    )
    return api_response(200, sanitize_user(_find_user(db, current_user["_id"])), "Account details updated successfully")


@router.patch("/avatar")
def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return _replace_user_image(db, current_user, "avatar", avatar)


@router.patch("/cover-image")
def update_user_cover_image(
    coverimage: Optional[UploadFile] = File(None),
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return _replace_user_image(db, current_user, "coverimage", coverimage)
