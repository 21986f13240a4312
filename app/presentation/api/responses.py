"""JSON envelope shared by every endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from ...domain.models import User


def envelope(status_code: int, data: Any = None, message: str = "Success") -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "data": {} if data is None else data,
        "message": message,
        "success": status_code < 400,
    }


def api_response(status_code: int, data: Any = None, message: str = "Success") -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(status_code, data, message))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "data": None,
            "message": message,
            "success": False,
        },
    )


def serialize_user(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "avatar": user.avatar,
        "coverImage": user.cover_image,
        "createdAt": user.created_at.replace(microsecond=0).isoformat(),
        "updatedAt": user.updated_at.replace(microsecond=0).isoformat(),
    }
