"""
Shared model configuration.

Field names are snake_case in Python and in storage; the wire format uses
camelCase aliases. Both spellings are accepted on input.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataResponse(CamelModel, Generic[T]):
    """Single-payload response envelope."""

    data: T


class MutationResponse(CamelModel, Generic[T]):
    """Response envelope for create/update endpoints."""

    data: T
    message: str


class MessageResponse(CamelModel):
    """Response carrying only a human-readable message."""

    message: str
