"""
Per-client rate limits for the unauthenticated auth endpoints.

Login and reset endpoints accept an identifier plus a secret, so they are
throttled per remote address. Kept out of main.py so routers can import the
limiter without a circular import.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from models.config import settings

LOGIN_LIMIT = "20/minute"
MERGE_LIMIT = "10/minute"
SET_PASSWORD_LIMIT = "10/minute"
FORGOT_PASSWORD_LIMIT = "5/minute"
RESET_PASSWORD_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
