"""Caller-side state for an interactive viewer.

The replay, resolver and layout functions are pure. :class:`ViewerSession`
is the single writer that owns the current query time, highlight selection,
snapshot and geometry, and recomputes them only when something changed.
"""

from __future__ import annotations

import logging
from typing import Dict

from .geometry.lanes import LaneLayout, layout
from .timeline.events import EventLog, Service
from .timeline.highlight import HighlightSelection, resolve
from .timeline.replay import reconstruct
from .topology.model import TopologyStore

logger = logging.getLogger(__name__)


class ViewerSession:
    """Hold the loaded network and the latest derived geometry."""

    def __init__(
        self,
        topology: TopologyStore | None = None,
        events: EventLog | None = None,
        *,
        time: float = 0.0,
    ) -> None:
        self._topology = topology or TopologyStore()
        self._events = events or EventLog()
        self._time = float(time)
        self._highlight: HighlightSelection | None = None
        self._snapshot: Dict[int, Service] = {}
        self._layout = LaneLayout()
        self._dirty = True
        self.recompute_count = 0

    # ------------------------------------------------------------------
    @property
    def topology(self) -> TopologyStore:
        return self._topology

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def time(self) -> float:
        return self._time

    @property
    def highlight(self) -> HighlightSelection | None:
        return self._highlight

    @property
    def snapshot(self) -> Dict[int, Service]:
        """Services present at :attr:`time` as of the last refresh."""
        return dict(self._snapshot)

    @property
    def dirty(self) -> bool:
        return self._dirty

    # ------------------------------------------------------------------
    def load(self, topology: TopologyStore, events: EventLog) -> None:
        """Replace the network and its timeline, dropping any highlight."""
        self._topology = topology
        self._events = events
        self._highlight = None
        self._dirty = True

    def set_time(self, value: float) -> None:
        """Move the query time; re-querying the same time is a no-op."""
        value = float(value)
        if value == self._time:
            return
        self._time = value
        self._dirty = True

    def select_service(self, service_id: int) -> bool:
        """Highlight ``service_id`` and jump to the time it was created.

        Returns ``False`` and keeps the previous highlight when the id does
        not appear in the timeline.
        """
        selection = resolve(self._events, service_id)
        if selection is None:
            logger.warning("Cannot highlight unknown service %s", service_id)
            return False
        self._highlight = selection
        self._time = selection.query_time
        self._dirty = True
        return True

    def clear_highlight(self) -> None:
        if self._highlight is None:
            return
        self._highlight = None
        self._dirty = True

    def refresh(self) -> LaneLayout:
        """Return current geometry, recomputing it only if inputs changed."""
        if not self._dirty:
            return self._layout
        highlighted = self._highlight.service_ids if self._highlight else frozenset()
        self._snapshot = reconstruct(self._events, self._time)
        self._layout = layout(
            self._topology, self._snapshot, highlighted, query_time=self._time
        )
        self._dirty = False
        self.recompute_count += 1
        return self._layout


__all__ = ["ViewerSession"]
