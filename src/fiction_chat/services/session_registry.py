"""In-memory registry of live client connections.

Maps each user id to the one connection currently allowed to receive live
pushes for that user. The registry is single-process and is only touched from
the event loop, so plain dict operations are enough; every mutation happens
between suspension points.

Thread Safety:
    NOT thread-safe. Use it from async code running on a single event loop.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from fastapi import WebSocket
from starlette.websockets import WebSocketState

__all__ = [
    "CLOSE_GOING_AWAY",
    "CLOSE_NORMAL",
    "CLOSE_POLICY_VIOLATION",
    "ChatConnection",
    "SessionRegistry",
    "WebSocketConnection",
]

logger = logging.getLogger(__name__)

# RFC 6455 close codes
CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001
CLOSE_POLICY_VIOLATION = 1008


@runtime_checkable
class ChatConnection(Protocol):
    """What the registry and dispatcher need from a live connection."""

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, data: dict[str, Any]) -> None: ...

    async def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None: ...


class WebSocketConnection:
    """``ChatConnection`` backed by a Starlette/FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket, user_id: str) -> None:
        self.websocket = websocket
        self.user_id = user_id

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, data: dict[str, Any]) -> None:
        await self.websocket.send_json(data)

    async def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None:
        if self.websocket.application_state != WebSocketState.CONNECTED:
            return
        await self.websocket.close(code=code, reason=reason)

    def __repr__(self) -> str:
        return f"WebSocketConnection(user_id={self.user_id!r})"


class SessionRegistry:
    """Holds at most one live connection per user id."""

    def __init__(self) -> None:
        self._sessions: dict[str, ChatConnection] = {}

    async def register(self, user_id: str, connection: ChatConnection) -> ChatConnection | None:
        """Install ``connection`` as the user's live session.

        A previously registered connection is discarded before the new one is
        installed and is then closed with a normal close code. Both steps that
        touch the map run without yielding to the event loop, so two racing
        registrations can never leave two live entries.

        Returns:
            The superseded connection, if there was one.
        """
        user_id = str(user_id)
        previous = self._sessions.pop(user_id, None)
        self._sessions[user_id] = connection
        logger.info("Registered session for user %s (%d active)", user_id, len(self._sessions))

        if previous is None or previous is connection:
            return None

        logger.info("Superseding previous session for user %s", user_id)
        try:
            await previous.close(CLOSE_NORMAL, "Superseded by a new connection")
        except Exception as err:
            logger.debug("Failed to close superseded session for %s: %s", user_id, err)
        return previous

    def unregister(self, user_id: str, connection: ChatConnection) -> bool:
        """Remove the user's session only if ``connection`` is the registered one.

        A late close event from a superseded socket must not evict the newer
        connection that replaced it.
        """
        user_id = str(user_id)
        if self._sessions.get(user_id) is not connection:
            return False
        del self._sessions[user_id]
        logger.info("Unregistered session for user %s (%d active)", user_id, len(self._sessions))
        return True

    def lookup(self, user_id: str) -> ChatConnection | None:
        """Return the user's live connection, if any."""
        return self._sessions.get(str(user_id))

    def active_user_ids(self) -> list[str]:
        return list(self._sessions)

    async def close_all(self, code: int = CLOSE_GOING_AWAY, reason: str | None = None) -> None:
        """Close and forget every session, used on shutdown."""
        sessions = list(self._sessions.items())
        self._sessions.clear()
        for user_id, connection in sessions:
            try:
                await connection.close(code, reason)
            except Exception as err:
                logger.debug("Failed to close session for %s on shutdown: %s", user_id, err)

    def __contains__(self, user_id: object) -> bool:
        return str(user_id) in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
