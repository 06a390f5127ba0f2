"""Utility helpers."""

from .helpers import format_duration

__all__ = ["format_duration"]
