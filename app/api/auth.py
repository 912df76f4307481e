"""
JWT authentication for protected routes.

The token is read from the `token` cookie first and from an
`Authorization: Bearer` header otherwise, so cross-domain clients that
cannot send cookies still authenticate. Rejections answer
`{"message": ...}` through auth_error_handler.
"""
import logging

import jwt
from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthError(Exception):
    """Rejected request; rendered by auth_error_handler."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def _extract_token(request: Request):
    token = request.cookies.get("token")
    if not token:
        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith(BEARER_PREFIX):
            token = auth_header[len(BEARER_PREFIX):].strip()
    return token


def verify_token(request: Request) -> str:
    """
    FastAPI dependency returning the caller's user id.

    Raises:
        AuthError: 401 without a token, 403 when it does not verify.
    """
    token = _extract_token(request)
    if not token:
        raise AuthError(401, "Not Authenticated!")

    auth_config = request.app.state.auth_config
    if not auth_config.secret_key:
        logger.error("No JWT secret configured; rejecting token")
        raise AuthError(403, "Token is not Valid!")
    try:
        payload = jwt.decode(token, auth_config.secret_key, algorithms=[auth_config.algorithm])
    except jwt.PyJWTError as e:
        logger.warning("Rejected token: %s", e)
        raise AuthError(403, "Token is not Valid!")

    user_id = payload.get("id")
    if user_id is None:
        raise AuthError(403, "Token is not Valid!")
    request.state.user_id = user_id
    return user_id
