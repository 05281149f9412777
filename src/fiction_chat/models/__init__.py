# src/fiction_chat/models/__init__.py
"""SQLAlchemy models for the chat subsystem."""

from .chat_activity import ChatActivity
from .conversation import Conversation, ConversationParticipant, make_pair_key
from .message import Message
from .user import ChatUser

__all__ = [
    "ChatActivity",
    "ChatUser",
    "Conversation", "ConversationParticipant",
    "Message",
    "make_pair_key",
]
