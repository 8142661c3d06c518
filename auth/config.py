"""
Configuration for the auth module.

The signing key comes from application settings (SECRET_KEY); only
token/cookie constants live here.
"""

COOKIE_NAME = "token"
JWT_ALGORITHM = "HS512"
USER_ID_CLAIM = "user_id"
