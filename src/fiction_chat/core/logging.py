"""Logging setup for the chat service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the ``fiction_chat`` logger tree.

    Calling this more than once replaces the handler instead of stacking them.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger("fiction_chat")
    for handler in list(root.handlers):
        if getattr(handler, "_fiction_chat", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._fiction_chat = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
