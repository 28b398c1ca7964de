"""
Shared router dependencies.

Authentication itself lives with the upstream identity provider; by the
time a request reaches us the authenticated user id is in a header and is
trusted as-is.
"""
from fastapi import Request

from dotoday.core.config import settings
from dotoday.core.errors import MissingIdentityError


def get_current_user_id(request: Request) -> str:
    user_id = (request.headers.get(settings.AUTH_USER_HEADER) or "").strip()
    if not user_id:
        raise MissingIdentityError(settings.AUTH_USER_HEADER)
    return user_id
