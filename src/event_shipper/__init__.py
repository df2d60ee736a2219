"""
Package: event_shipper
Description: Event-shipping pipeline stages.

- FieldExtractor: narrows a JSON event body to one top-level string field
- HttpSink: drains a transactional channel into an HTTP endpoint
"""

from .delivery import HttpSink, SinkRunner
from .extraction import FieldExtractor
from .models import Event, Status

__version__ = "0.1.0"

__all__ = [
    "Event",
    "FieldExtractor",
    "HttpSink",
    "SinkRunner",
    "Status",
]
