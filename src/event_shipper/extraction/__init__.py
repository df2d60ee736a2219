"""
Package: extraction
Description: Event body transforms applied before delivery.
"""

from .extractor import FieldExtractor

__all__ = ["FieldExtractor"]
