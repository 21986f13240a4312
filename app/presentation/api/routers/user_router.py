"""API router for registration, sessions and profile management."""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from ....application.services.profile_service import ProfileService
from ....application.services.session_service import SessionService, extract_refresh_token
from ....core.config import Settings
from ....core.dependencies import get_profile_service, get_session_service, get_settings
from ....domain.models import MediaFile, User
from ....services.token_service import TokenPair
from ...api.dependencies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, require_current_user
from ...api.responses import api_response, serialize_user
from ...api.schemas.user_schemas import (
    ChangePasswordRequest,
    RefreshTokenRequest,
    UpdateAccountRequest,
    UserLoginRequest,
)

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    full_name: Optional[str] = Form(default=None, alias="fullName"),
    username: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    password: Optional[str] = Form(default=None),
    avatar: Optional[UploadFile] = File(default=None),
    cover_image: Optional[UploadFile] = File(default=None, alias="coverImage"),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    """Register a new user with an avatar and an optional cover image."""
    user = await profile_service.register(
        full_name=full_name,
        username=username,
        email=email,
        password=password,
        avatar=await _to_media(avatar),
        cover_image=await _to_media(cover_image),
    )
    return api_response(status.HTTP_201_CREATED, serialize_user(user), "User registered successfully")


@router.post("/login")
async def login(
    payload: UserLoginRequest,
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    result = await session_service.login(
        password=payload.password,
        username=payload.username,
        email=payload.email,
    )
    response = api_response(
        status.HTTP_200_OK,
        {
            "user": serialize_user(result.user),
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
        },
        "User logged in successfully",
    )
    _set_session_cookies(response, result.tokens, settings)
    return response


@router.post("/logout")
async def logout(
    user: User = Depends(require_current_user),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    await session_service.logout(user.id)
    response = api_response(status.HTTP_200_OK, {}, "User logged out")
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, path="/", secure=settings.cookie_secure, httponly=True, samesite="lax")
    return response


@router.post("/refresh-token")
async def refresh_token(
    payload: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    incoming = extract_refresh_token(refresh_cookie, payload.refresh_token if payload else None)
    tokens = await session_service.refresh(incoming)
    response = api_response(
        status.HTTP_200_OK,
        {"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token},
        "Access token refreshed",
    )
    _set_session_cookies(response, tokens, settings)
    return response


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(require_current_user),
    session_service: SessionService = Depends(get_session_service),
) -> JSONResponse:
    await session_service.change_password(user.id, payload.old_password, payload.new_password)
    return api_response(status.HTTP_200_OK, {}, "Password changed successfully")


@router.get("/current-user")
async def current_user(
    user: User = Depends(require_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    return api_response(
        status.HTTP_200_OK,
        serialize_user(profile_service.get_current_user(user)),
        "Current user fetched successfully",
    )


@router.patch("/update-account")
async def update_account(
    payload: UpdateAccountRequest,
    user: User = Depends(require_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    updated = await profile_service.update_profile(user.id, full_name=payload.full_name, email=payload.email)
    return api_response(status.HTTP_200_OK, serialize_user(updated), "Account details updated successfully")


@router.patch("/avatar")
async def update_avatar(
    avatar: Optional[UploadFile] = File(default=None),
    user: User = Depends(require_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    updated = await profile_service.update_avatar(user.id, await _to_media(avatar))
    return api_response(status.HTTP_200_OK, serialize_user(updated), "Avatar updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(default=None, alias="coverImage"),
    user: User = Depends(require_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
) -> JSONResponse:
    updated = await profile_service.update_cover_image(user.id, await _to_media(cover_image))
    return api_response(status.HTTP_200_OK, serialize_user(updated), "Cover image updated successfully")


async def _to_media(upload: Optional[UploadFile]) -> Optional[MediaFile]:
    if upload is None:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return MediaFile(
        filename=upload.filename or "upload",
        content=content,
        content_type=upload.content_type,
    )


def _set_session_cookies(response: JSONResponse, tokens: TokenPair, settings: Settings) -> None:
    access_max_age = int(settings.access_token_expiry_minutes * 60)
    refresh_max_age = int(settings.refresh_token_expiry_days * 24 * 60 * 60)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=access_max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=refresh_max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
