"""Auth middleware -- FastAPI dependencies for services and the current user.

Session handling lives outside this service.  The upstream gateway
authenticates the caller and forwards the user id in ``X-User-Id``; the id is
resolved here against the user directory.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from jobguard.config import get_settings
from jobguard.directory.models import User
from jobguard.services import Services, build_services


@lru_cache
def _default_services() -> Services:
    return build_services(get_settings())


def get_services() -> Services:
    """FastAPI dependency returning the wired stores and services.

    Tests replace it through ``app.dependency_overrides``.
    """
    return _default_services()


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    services: Services = Depends(get_services),
) -> User:
    """FastAPI dependency that resolves the authenticated user.

    Raises ``401 Unauthorized`` if the header is missing or names no user.
    """
    if x_user_id:
        user = services.users.get_user(x_user_id)
        if user is not None:
            return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )
