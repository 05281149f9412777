"""User-related Pydantic schemas."""

from pydantic import Field

from .common import CamelModel


class ChatUserOut(CamelModel):
    """Identity fields of a chat user as seen by clients."""

    id: str = Field(..., description="User id, identical to the host application's id")
    fullname: str = Field(..., description="Display name")
    profile_picture: str | None = Field(None, description="Avatar reference")
