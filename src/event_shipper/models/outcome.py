"""
Module: outcome.py
Description: Result values returned by the pipeline stages.

Each stage reports what happened as a value instead of raising:
the extractor returns an ExtractionResult, one HTTP exchange yields a
SendResult, and the sink's decision table turns that into a
DeliveryDecision carrying the transaction action and the Status
handed back to the scheduler.

Key Components:
- Status: READY / BACKOFF signal for the scheduler
- ExtractionResult: Extracted text or a drop with its reason
- SendResult: Status code read from the endpoint or the transport error
- DeliveryDecision: Commit/rollback, Status and log level for one attempt

Dependencies: pydantic, enum, typing
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from event_shipper.exceptions import DeliveryError, ParseError, ShapeError


class Status(str, Enum):
    """Outcome of one sink invocation."""

    READY = "READY"
    BACKOFF = "BACKOFF"


class ExtractionResult(BaseModel):
    """
    Result of one parse/match pass over an event body.

    Attributes:
        value: Extracted string value, None when the event is dropped
        error: Reason for a logged drop; None for a silent drop
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Optional[str] = None
    error: Optional[Union[ParseError, ShapeError]] = None

    @property
    def extracted(self) -> bool:
        return self.value is not None

    @classmethod
    def matched(cls, value: str) -> "ExtractionResult":
        return cls(value=value)

    @classmethod
    def dropped(cls, error: Optional[Union[ParseError, ShapeError]] = None) -> "ExtractionResult":
        return cls(error=error)


class SendResult(BaseModel):
    """
    Result of one HTTP POST.

    Exactly one of status_code and transport_error is set, except when
    the endpoint answered with a status line that could not be read, in
    which case status_code is None and unreadable is True.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status_code: Optional[int] = None
    transport_error: Optional[Exception] = None
    unreadable: bool = False


class DeliveryDecision(BaseModel):
    """
    Transaction action and scheduler signal for one delivery attempt.

    Attributes:
        commit: True to commit the transaction, False to roll it back
        status: Status returned by the sink
        log_level: Level of the log line describing the outcome
        message: Log message describing the outcome
        error: Delivery error classification, None on success
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    commit: bool
    status: Status
    log_level: str = Field(pattern=r"^(debug|error)$")
    message: str
    error: Optional[DeliveryError] = None
