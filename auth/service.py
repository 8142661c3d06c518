"""
Core token logic.

Tokens are HS512 JWTs carrying a single `user_id` claim. No expiry is set:
the token is the user's identity, not a session.
"""

import uuid

import jwt

from .config import JWT_ALGORITHM, USER_ID_CLAIM


class AuthError(Exception):
    """Token missing, malformed, forged, or without a user id."""


def new_user_id() -> str:
    return str(uuid.uuid4())


def build_token(user_id: str, secret: str) -> str:
    """Return a signed token for the given user id."""
    return jwt.encode({USER_ID_CLAIM: user_id}, secret, algorithm=JWT_ALGORITHM)


def get_user_id(token: str, secret: str) -> str:
    """
    Validate a token and return its user id.

    Raises:
        AuthError: If the signature, algorithm, or claim is invalid.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as err:
        raise AuthError(f"token is not valid: {err}") from err

    user_id = claims.get(USER_ID_CLAIM)
    if not user_id or not isinstance(user_id, str):
        raise AuthError("user id is absent in the jwt")
    return user_id
