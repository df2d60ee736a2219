"""
Module: event.py
Description: Event data model shared by the pipeline stages.

Defines the Event passed between the channel, the field extractor and
the HTTP sink. The body is an opaque byte payload; headers carry
optional metadata set by the upstream source.

Key Components:
- Event: Byte payload plus string headers, mutable in place

Dependencies: pydantic, typing
"""

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Event(BaseModel):
    """
    Event model representing one unit of data in the pipeline.

    A transform may replace the body in place; a stage that discards
    the event returns None instead of an Event.

    Attributes:
        body: Raw event payload (may be empty)
        headers: Optional event metadata
    """

    model_config = ConfigDict(validate_assignment=True)

    body: bytes = Field(
        default=b"",
        description="Raw event payload"
    )
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Event metadata"
    )

    @field_validator('body', mode='before')
    @classmethod
    def validate_body(cls, v: Optional[bytes]) -> bytes:
        """Treat a missing body as an empty one and reject text payloads."""
        if v is None:
            return b""
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        if not isinstance(v, bytes):
            raise ValueError("body must be bytes")
        return v

    def get_body(self) -> bytes:
        """Return the raw event payload."""
        return self.body

    def set_body(self, body: bytes) -> None:
        """Replace the event payload."""
        self.body = body
