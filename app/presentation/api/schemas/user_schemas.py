"""Pydantic schemas for user API endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class UserLoginRequest(BaseModel):
    """Request schema for user login; either username or email identifies the account."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")


class ChangePasswordRequest(BaseModel):
    old_password: Optional[str] = Field(default=None, alias="oldPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class UpdateAccountRequest(BaseModel):
    """Both fields are optional; absent ones are left untouched."""

    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: Optional[str] = None
