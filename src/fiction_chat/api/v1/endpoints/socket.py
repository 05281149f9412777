# src/fiction_chat/api/v1/endpoints/socket.py
"""Live socket endpoint.

Clients connect with ``?token=<jwt>``. A connection moves through
CONNECTING -> AUTHENTICATING -> ACTIVE -> CLOSED; it is visible to message
delivery only while ACTIVE.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from fiction_chat.core.errors import AuthError, ChatError, ValidationError
from fiction_chat.core.security import verify_token
from fiction_chat.schemas.frames import (
    FrameType,
    InboundFrame,
    MarkAsReadPayload,
    SendMessagePayload,
    connection_success_frame,
    error_frame,
    mark_as_read_frame,
    message_sent_frame,
)
from fiction_chat.services.delivery import DeliveryDispatcher
from fiction_chat.services.message_store import MessageStore
from fiction_chat.services.session_registry import (
    CLOSE_POLICY_VIOLATION,
    SessionRegistry,
    WebSocketConnection,
)

from ..dependencies import RegistryDep, SessionFactoryDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["socket"])

T = TypeVar("T")


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    ACTIVE = "active"
    CLOSED = "closed"


class ConnectionController:
    """Drives one socket from handshake to teardown."""

    def __init__(
        self,
        websocket: WebSocket,
        registry: SessionRegistry,
        session_factory: Callable[[], Session],
    ) -> None:
        self.websocket = websocket
        self.registry = registry
        self.session_factory = session_factory
        self.dispatcher = DeliveryDispatcher(registry)
        self.state = ConnectionState.CONNECTING
        self.user_id: str | None = None
        self.connection: WebSocketConnection | None = None
        self._handlers: dict[FrameType, Callable[[dict[str, Any]], Awaitable[None]]] = {
            FrameType.MARK_AS_READ: self._on_mark_as_read,
            FrameType.SEND_MESSAGE: self._on_send_message,
        }

    async def run(self, token: str | None) -> None:
        self.state = ConnectionState.AUTHENTICATING
        await self.websocket.accept()

        if not token:
            await self._reject("Token not provided")
            return
        try:
            user_id = verify_token(token)
        except AuthError:
            await self._reject("Invalid token")
            return

        self.user_id = user_id
        self.connection = WebSocketConnection(self.websocket, user_id)
        await self.registry.register(user_id, self.connection)
        self.state = ConnectionState.ACTIVE
        logger.info("User %s connected", user_id)

        try:
            await self.connection.send_json(connection_success_frame(user_id))
            # A superseded connection is closed server-side and leaves the loop.
            while self.connection.is_open:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
                text = message.get("text")
                if text is None:
                    logger.debug("Ignoring binary frame from %s", user_id)
                    continue
                await self.handle_frame(text)
        except WebSocketDisconnect:
            logger.info("User %s disconnected", user_id)
        finally:
            self.state = ConnectionState.CLOSED
            self.registry.unregister(user_id, self.connection)

    async def _reject(self, reason: str) -> None:
        logger.info("Rejecting socket connection: %s", reason)
        self.state = ConnectionState.CLOSED
        await self.websocket.close(code=CLOSE_POLICY_VIOLATION, reason=reason)

    async def handle_frame(self, raw: str) -> None:
        """Act on one inbound frame; malformed or unknown frames are ignored."""
        try:
            frame = InboundFrame.model_validate_json(raw)
        except PydanticValidationError:
            logger.debug("Ignoring malformed frame from %s", self.user_id)
            return

        frame_type = frame.frame_type()
        if frame_type is None:
            logger.debug("Ignoring unknown frame type %r from %s", frame.type, self.user_id)
            return

        try:
            await self._handlers[frame_type](frame.payload)
        except ChatError as err:
            await self._reply(error_frame(err.to_payload()))

    async def _run_store(self, operation: Callable[[MessageStore], T]) -> T:
        def work() -> T:
            with self.session_factory() as db:
                return operation(MessageStore(db))

        return await run_in_threadpool(work)

    async def _reply(self, frame: dict[str, Any]) -> None:
        if self.connection is None or not self.connection.is_open:
            return
        await self.connection.send_json(frame)

    async def _on_mark_as_read(self, payload: dict[str, Any]) -> None:
        try:
            request = MarkAsReadPayload.model_validate(payload)
        except PydanticValidationError as err:
            raise ValidationError("conversationId is required") from err

        user_id = self.user_id
        activity = await self._run_store(
            lambda store: store.mark_read(user_id, request.conversation_id)
        )
        await self._reply(mark_as_read_frame(activity))

    async def _on_send_message(self, payload: dict[str, Any]) -> None:
        try:
            request = SendMessagePayload.model_validate(payload)
        except PydanticValidationError as err:
            raise ValidationError("toId and content are required") from err

        user_id = self.user_id
        message = await self._run_store(
            lambda store: store.send(user_id, request.to_id, request.content)
        )
        await self.dispatcher.deliver(message, request.to_id)
        await self._reply(message_sent_frame(message))


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    registry: RegistryDep,
    session_factory: SessionFactoryDep,
    token: str | None = Query(None),
) -> None:
    """Authenticate the socket and serve control frames until it closes."""
    controller = ConnectionController(websocket, registry, session_factory)
    await controller.run(token)
