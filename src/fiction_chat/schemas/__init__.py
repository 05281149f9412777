"""
Pydantic schemas for API request/response models and socket frames.

These schemas define the structure of chat data for serialization and validation.
"""

from .conversation import ConversationCreate, ConversationCreated, ConversationSummary, LastMessage
from .frames import FrameType, InboundFrame, MarkAsReadPayload, OutboundType
from .message import ChatActivityOut, MessageCreate, MessageOut
from .user import ChatUserOut

__all__ = [
    "ChatActivityOut",
    "ChatUserOut",
    "ConversationCreate", "ConversationCreated", "ConversationSummary", "LastMessage",
    "FrameType", "InboundFrame", "MarkAsReadPayload", "OutboundType",
    "MessageCreate", "MessageOut",
]
