"""
FastAPI dependency functions for authentication.

Use with Depends() on routes:
    - get_current_user: identify or enroll the caller (sets a cookie for new users)
    - require_user: the caller must already hold a valid token
"""

from fastapi import HTTPException, Request, Response, status

from .config import COOKIE_NAME
from .service import AuthError, build_token, get_user_id, new_user_id


def _secret(request: Request) -> str:
    return request.app.state.settings.secret_key


def _read_token(request: Request) -> str:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        token = request.headers.get("Authorization", "")
        if token.lower().startswith("bearer "):
            token = token[7:]
    return token.strip()


def get_current_user(request: Request, response: Response) -> str:
    """
    Return the caller's user id, issuing a new identity when no token is sent.

    Raises:
        HTTPException: 401 if a token is present but invalid.
    """
    secret = _secret(request)
    token = _read_token(request)
    if not token:
        user_id = new_user_id()
        response.set_cookie(
            COOKIE_NAME,
            build_token(user_id, secret),
            httponly=True,
            secure=request.app.state.settings.base_url.startswith("https://"),
            path="/",
        )
        return user_id

    try:
        return get_user_id(token, secret)
    except AuthError as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err))


def require_user(request: Request) -> str:
    """
    Return the caller's user id from an existing token.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    token = _read_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="cookie with the token is invalid or not provided",
        )
    try:
        return get_user_id(token, _secret(request))
    except AuthError as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err))
