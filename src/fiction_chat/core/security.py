"""Verification of the host application's signed bearer tokens.

Tokens are issued by the host application with a secret shared with this
service. Only verification happens here; ``create_access_token`` exists so tests
and local tooling can mint tokens in the same shape the host produces.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from fiction_chat.core.errors import AuthError
from fiction_chat.core.settings import settings

logger = logging.getLogger(__name__)


def verify_token(
    token: str | None,
    *,
    secret: str | None = None,
    claim: str | None = None,
    algorithms: Sequence[str] | None = None,
) -> str:
    """Validate a signed token and return the caller's user identifier.

    Args:
        token: Raw JWT taken from a header or connection URI.
        secret: Shared signing secret; defaults to ``settings.jwt_secret``.
        claim: Claim holding the user id; defaults to ``settings.jwt_user_id_claim``.
        algorithms: Accepted algorithms; defaults to ``[settings.jwt_algorithm]``.

    Returns:
        The user identifier as a string, so numeric host ids compare equal to
        the mirrored string primary keys.

    Raises:
        AuthError: If the token is missing, malformed, expired, badly signed or
            lacks the configured claim.
    """
    if not token:
        raise AuthError("Token not provided")

    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=list(algorithms or [settings.jwt_algorithm]),
        )
    except JWTError as err:
        logger.debug("Rejected token: %s", err)
        raise AuthError() from err

    user_id = payload.get(claim or settings.jwt_user_id_claim)
    if user_id is None or str(user_id) == "":
        raise AuthError()
    return str(user_id)


def create_access_token(
    user_id: str | int,
    *,
    expires_delta: timedelta | None = None,
    secret: str | None = None,
    claim: str | None = None,
) -> str:
    """Mint a token in the host application's format."""
    expire = datetime.now(UTC) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {claim or settings.jwt_user_id_claim: user_id, "exp": expire}
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)
