# src/fiction_chat/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .chat import router as chat_router
from .socket import router as socket_router

__all__ = [
    "admin_router",
    "chat_router",
    "socket_router",
]
