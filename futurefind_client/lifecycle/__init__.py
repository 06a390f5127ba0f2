"""App lifecycle signals."""

from .foreground import ForegroundSignal, Subscription

__all__ = ["ForegroundSignal", "Subscription"]
