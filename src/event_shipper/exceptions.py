"""
Module: exceptions.py
Description: Error taxonomy for the event shipper.

Only ConfigError is raised to callers. The parse, shape and delivery
errors classify per-event failures and travel inside result objects
(ExtractionResult, DeliveryDecision) so the pipeline can log them and
decide between dropping, committing and rolling back.
"""

from typing import Optional


class EventShipperError(Exception):
    """Base exception for event shipper errors."""


class ConfigError(EventShipperError):
    """Raised when component configuration is invalid at construction."""


class ParseError(EventShipperError):
    """Event body could not be tokenized as JSON."""


class ShapeError(EventShipperError):
    """Event body is valid JSON but the wanted field has the wrong shape."""


class DeliveryError(EventShipperError):
    """Base class for outcomes of a failed delivery attempt."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientDeliveryError(DeliveryError):
    """Receiver temporarily unavailable; the event should be redelivered."""


class PermanentDeliveryError(DeliveryError):
    """Receiver rejected the event; retrying it can never succeed."""


class UnclassifiedDeliveryError(DeliveryError):
    """Receiver answered with a status the sink does not expect."""
