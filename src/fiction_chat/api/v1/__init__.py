# src/fiction_chat/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import admin_router, chat_router, socket_router

__all__ = [
    "admin_router",
    "chat_router",
    "socket_router",
]
