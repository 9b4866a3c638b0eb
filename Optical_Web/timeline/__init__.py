"""Service timeline: events, replay and highlight resolution."""

from .events import (
    Allocation,
    Event,
    EventLog,
    Reallocation,
    ReleaseExpired,
    Service,
)

__all__ = [
    "Allocation",
    "Event",
    "EventLog",
    "Reallocation",
    "ReleaseExpired",
    "Service",
]
