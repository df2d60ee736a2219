"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used throughout the event shipper:
- logger: Structured logging configuration and helpers
- metrics: Sink counters and CloudWatch publishing
"""

__all__ = []
