"""
Auth package for the URL shortener.

Identifies users through a signed JWT kept in the `token` cookie. Unknown
visitors get a fresh user id; the per-user routes require an existing token.
"""
