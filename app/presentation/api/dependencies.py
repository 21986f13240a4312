from typing import Optional

from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.dependencies import get_token_issuer, get_user_repository
from ...domain.errors import AuthError, InvalidTokenError
from ...domain.models import User
from ...domain.ports.persistence import UserRepository
from ...services.token_service import TokenIssuer

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_current_user(
    request: Request,
    access_cookie: Optional[str] = Cookie(default=None, alias=ACCESS_TOKEN_COOKIE),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Resolve the access token from cookie or bearer header and attach its user to the request."""
    token = access_cookie
    if not token and credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    if not token:
        raise AuthError("Unauthorized request")

    try:
        payload = token_issuer.verify_access(token)
    except InvalidTokenError as exc:
        raise AuthError("Invalid access token") from exc

    user = await users.find_by_id(payload["sub"])
    if user is None:
        raise AuthError("Invalid access token")
    request.state.user = user
    return user
