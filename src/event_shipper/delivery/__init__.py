"""
Package: delivery
Description: Event delivery to a remote HTTP endpoint.

Provides the transactional HTTP sink, the decision table mapping
response codes to commit/rollback/backoff, and a polling runner
that paces backoffs.
"""

from .policy import classify
from .runner import SinkRunner
from .sink import HttpSink

__all__ = ["HttpSink", "SinkRunner", "classify"]
