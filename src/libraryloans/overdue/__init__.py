"""Overdue-loan index module."""

from .index import INDEX_NAME, OverdueIndex

__all__ = ["INDEX_NAME", "OverdueIndex"]
