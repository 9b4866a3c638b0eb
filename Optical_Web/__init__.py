"""Optical_Web package initialization."""

from __future__ import annotations

from .geometry.lanes import LaneLayout, layout
from .session import ViewerSession
from .timeline.highlight import HighlightSelection, resolve
from .timeline.replay import reconstruct

__all__ = [
    "HighlightSelection",
    "LaneLayout",
    "ViewerSession",
    "layout",
    "reconstruct",
    "resolve",
]
