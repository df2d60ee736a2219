"""
Package: config
Description: Validated, immutable component settings.
"""

from .settings import (
    DeliverySettings,
    ExtractorSettings,
    RunnerSettings,
    load_delivery_settings,
    load_extractor_settings,
    load_runner_settings,
)

__all__ = [
    "DeliverySettings",
    "ExtractorSettings",
    "RunnerSettings",
    "load_delivery_settings",
    "load_extractor_settings",
    "load_runner_settings",
]
