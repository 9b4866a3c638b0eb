"""State management for the lane viewer UI."""

from .Timeline import TimelineModel

__all__ = ["TimelineModel"]
