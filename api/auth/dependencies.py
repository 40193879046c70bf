"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

import hmac

from fastapi import Depends, Header, HTTPException, status

from core import config

from . import service


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header.",
        )

    scheme, _, token = raw.partition(" ")
    if scheme.strip().lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token.strip()


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return await service.get_user_from_access_token(access_token)


async def get_current_user_id(current_user: dict = Depends(get_current_user)) -> int:
    return int(current_user["id"])


async def require_cron_secret(x_cron_secret: str | None = Header(default=None)) -> None:
    """
    Guard for scheduler-triggered endpoints (no user session).
    """
    provided = (x_cron_secret or "").encode("utf-8")
    if not provided or not hmac.compare_digest(provided, config.cron_secret().encode("utf-8")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
