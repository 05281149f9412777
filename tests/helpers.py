# tests/helpers.py
"""Helpers and test doubles shared across test modules."""

from fiction_chat.core.security import create_access_token
from fiction_chat.services.session_registry import CLOSE_NORMAL


def auth_headers(user_id: str | int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


class FakeConnection:
    """In-memory stand-in for a live socket."""

    def __init__(self, *, fail_send: bool = False, fail_close: bool = False) -> None:
        self.sent: list[dict] = []
        self.closed_with: tuple[int, str | None] | None = None
        self.fail_send = fail_send
        self.fail_close = fail_close

    @property
    def is_open(self) -> bool:
        return self.closed_with is None

    async def send_json(self, data: dict) -> None:
        if self.fail_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None:
        if self.fail_close:
            raise RuntimeError("already closed")
        self.closed_with = (code, reason)
