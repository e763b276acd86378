"""
Shared slowapi limiter.

Lives outside portal.main so routers can decorate endpoints without a
circular import.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from portal.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.GENERAL_RATE_LIMIT],
)
