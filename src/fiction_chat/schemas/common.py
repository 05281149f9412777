"""Shared Pydantic building blocks for API and socket payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose wire names are camelCase while attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return a JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)


def coerce_user_id(value: Any) -> Any:
    """Accept numeric host user ids and normalise them to strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value


class ErrorBody(BaseModel):
    """Stable error shape returned by every failing request."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")


class ErrorResponse(BaseModel):
    """Envelope around ``ErrorBody``."""

    error: ErrorBody
