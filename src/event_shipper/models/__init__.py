"""
Module: models
Description: Package initialization for pipeline data models.

This package contains the data models shared by the pipeline stages:
- Event: Byte payload plus metadata moving through the pipeline
- Status: READY / BACKOFF outcome of one sink invocation
- ExtractionResult, SendResult, DeliveryDecision: explicit stage results

All models are exported here for convenient importing.
"""

from .event import Event
from .outcome import DeliveryDecision, ExtractionResult, SendResult, Status

__all__ = [
    "Event",
    "Status",
    "ExtractionResult",
    "SendResult",
    "DeliveryDecision",
]
