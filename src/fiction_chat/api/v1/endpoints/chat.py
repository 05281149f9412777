# src/fiction_chat/api/v1/endpoints/chat.py
"""REST surface of the chat service.

Resource routes are the primary interface. The ``?method=`` dispatcher on the
collection root keeps older clients that address operations by action name
working against the same services.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from fiction_chat.core.errors import UnknownActionError, ValidationError
from fiction_chat.schemas.common import ErrorResponse
from fiction_chat.schemas.conversation import ConversationCreate, ConversationCreated
from fiction_chat.schemas.message import MessageCreate
from fiction_chat.services.delivery import DeliveryDispatcher
from fiction_chat.services.message_store import MessageStore

from ..dependencies import (
    CredentialsDep,
    CurrentUserIdDep,
    DispatcherDep,
    MessageStoreDep,
    authenticate,
)

router = APIRouter(
    prefix="/chat",
    tags=["chat"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
)


async def _send_and_deliver(
    store: MessageStore,
    dispatcher: DeliveryDispatcher,
    sender_id: str,
    body: MessageCreate,
) -> dict[str, Any]:
    message = await run_in_threadpool(store.send, sender_id, body.to_id, body.content)
    await dispatcher.deliver(message, body.to_id)
    return message.to_wire()


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    body: MessageCreate,
    user_id: CurrentUserIdDep,
    store: MessageStoreDep,
    dispatcher: DispatcherDep,
) -> dict[str, Any]:
    """Store a message and push it to the recipient if they are online."""
    return await _send_and_deliver(store, dispatcher, user_id, body)


@router.get("/conversations")
def list_conversations(user_id: CurrentUserIdDep, store: MessageStoreDep) -> list[dict[str, Any]]:
    """List the caller's conversations, newest first."""
    return [summary.to_wire() for summary in store.list_conversations(user_id)]


@router.post("/conversations")
def create_conversation(
    body: ConversationCreate,
    user_id: CurrentUserIdDep,
    store: MessageStoreDep,
    response: Response,
) -> dict[str, Any]:
    """Return the conversation with another user, creating it if needed."""
    resolution = store.create_conversation(user_id, body.to_id)
    response.status_code = status.HTTP_201_CREATED if resolution.created else status.HTTP_200_OK
    return ConversationCreated(
        conversation_id=resolution.conversation_id,
        created=resolution.created,
    ).to_wire()


@router.get("/conversations/{conversation_id}/messages")
def list_messages(
    conversation_id: int,
    user_id: CurrentUserIdDep,
    store: MessageStoreDep,
) -> list[dict[str, Any]]:
    """Return a conversation's history in chronological order."""
    return [message.to_wire() for message in store.list_messages(conversation_id, user_id)]


@router.post("/conversations/{conversation_id}/read", status_code=status.HTTP_201_CREATED)
def mark_conversation_read(
    conversation_id: int,
    user_id: CurrentUserIdDep,
    store: MessageStoreDep,
) -> dict[str, Any]:
    """Record that the caller has read the conversation up to now."""
    return store.mark_read(user_id, conversation_id).to_wire()


@router.get("/users/available")
def list_available_users(user_id: CurrentUserIdDep, store: MessageStoreDep) -> list[dict[str, Any]]:
    """List every chat user except the caller."""
    return [user.to_wire() for user in store.list_available_users(user_id)]


class ChatAction(str, Enum):
    """Action names accepted by the ``?method=`` dispatcher."""

    SEND_MESSAGE = "send-message"
    GET_CONVERSATIONS = "get-conversations"
    GET_MESSAGES = "get-messages"
    GET_AVAILABLE_USERS = "get-available-users-to-chat"
    CREATE_CONVERSATION = "create-convo"


@dataclass
class ActionContext:
    request: Request
    user_id: str
    store: MessageStore
    dispatcher: DeliveryDispatcher

    async def json_body(self) -> dict[str, Any]:
        if not await self.request.body():
            return {}
        try:
            body = await self.request.json()
        except json.JSONDecodeError as err:
            raise ValidationError("Request body is not valid JSON") from err
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body


def _parse(model: type[MessageCreate] | type[ConversationCreate], data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as err:
        message = "toId is required" if "toId" not in data else "Invalid request body"
        raise ValidationError(message) from err


async def _action_send_message(ctx: ActionContext) -> JSONResponse:
    body = _parse(MessageCreate, await ctx.json_body())
    wire = await _send_and_deliver(ctx.store, ctx.dispatcher, ctx.user_id, body)
    return JSONResponse(wire, status_code=status.HTTP_201_CREATED)


async def _action_get_conversations(ctx: ActionContext) -> JSONResponse:
    summaries = await run_in_threadpool(ctx.store.list_conversations, ctx.user_id)
    return JSONResponse([summary.to_wire() for summary in summaries])


async def _action_get_messages(ctx: ActionContext) -> JSONResponse:
    raw_id = ctx.request.query_params.get("conversationId")
    if raw_id is None:
        raise ValidationError("conversationId is required")
    try:
        conversation_id = int(raw_id)
    except ValueError as err:
        raise ValidationError("conversationId must be an integer") from err
    messages = await run_in_threadpool(ctx.store.list_messages, conversation_id, ctx.user_id)
    return JSONResponse([message.to_wire() for message in messages])


async def _action_get_available_users(ctx: ActionContext) -> JSONResponse:
    users = await run_in_threadpool(ctx.store.list_available_users, ctx.user_id)
    return JSONResponse([user.to_wire() for user in users])


async def _action_create_conversation(ctx: ActionContext) -> JSONResponse:
    data = await ctx.json_body()
    # Older clients wrap arguments in a "params" object.
    params = data.get("params") if isinstance(data.get("params"), dict) else data
    body = _parse(ConversationCreate, params)
    resolution = await run_in_threadpool(ctx.store.create_conversation, ctx.user_id, body.to_id)
    created = ConversationCreated(
        conversation_id=resolution.conversation_id,
        created=resolution.created,
    )
    return JSONResponse(
        created.to_wire(),
        status_code=status.HTTP_201_CREATED if resolution.created else status.HTTP_200_OK,
    )


ACTION_HANDLERS: dict[ChatAction, Callable[[ActionContext], Awaitable[JSONResponse]]] = {
    ChatAction.SEND_MESSAGE: _action_send_message,
    ChatAction.GET_CONVERSATIONS: _action_get_conversations,
    ChatAction.GET_MESSAGES: _action_get_messages,
    ChatAction.GET_AVAILABLE_USERS: _action_get_available_users,
    ChatAction.CREATE_CONVERSATION: _action_create_conversation,
}


@router.api_route("", methods=["GET", "POST"])
async def dispatch_action(
    request: Request,
    credentials: CredentialsDep,
    store: MessageStoreDep,
    dispatcher: DispatcherDep,
    method: str | None = Query(None, description="Legacy action name"),
) -> Any:
    """Dispatch a legacy ``?method=`` request to the matching operation.

    Without a method the route answers as a liveness probe.
    """
    if method is None:
        return {"status": "ok"}
    try:
        action = ChatAction(method)
    except ValueError as err:
        raise UnknownActionError(method, [item.value for item in ChatAction]) from err

    user_id = authenticate(credentials)
    ctx = ActionContext(request=request, user_id=user_id, store=store, dispatcher=dispatcher)
    return await ACTION_HANDLERS[action](ctx)
