# src/fiction_chat/api/v1/endpoints/admin.py
"""Destructive administration endpoints, disabled unless ALLOW_RESET is set."""

from __future__ import annotations

import hmac
from typing import Annotated, Any

from fastapi import APIRouter, Header

from fiction_chat.core.errors import AuthError, NotFoundError
from fiction_chat.core.settings import settings
from fiction_chat.services.admin import reset_chat

from ..dependencies import SessionDep

router = APIRouter(prefix="/admin", tags=["admin"])


def _require_admin(token: str | None) -> None:
    if not settings.allow_reset:
        raise NotFoundError()
    if not settings.admin_token or not token or not hmac.compare_digest(token, settings.admin_token):
        raise AuthError("Invalid admin token")


@router.post("/reset")
def reset(
    db: SessionDep,
    x_admin_token: Annotated[str | None, Header()] = None,
    resync: bool = True,
) -> dict[str, Any]:
    """Wipe all chat data and re-import users from the host table."""
    _require_admin(x_admin_token)
    synced = reset_chat(db, resync=resync)
    return {"status": "reset", "usersSynced": synced}
