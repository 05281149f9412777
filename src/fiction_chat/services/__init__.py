# src/fiction_chat/services/__init__.py
"""Business logic services for the chat subsystem."""

from .admin import reset_chat
from .delivery import DeliveryDispatcher
from .message_store import MessageStore
from .session_registry import ChatConnection, SessionRegistry, WebSocketConnection
from .user_sync import sync_users

__all__ = [
    "ChatConnection",
    "DeliveryDispatcher",
    "MessageStore",
    "SessionRegistry",
    "WebSocketConnection",
    "reset_chat",
    "sync_users",
]
