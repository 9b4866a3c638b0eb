from __future__ import annotations

"""Timeline model exposed to QML panels."""

import logging
from typing import Dict, List, Union

from PySide6.QtCore import Property, QObject, Signal, Slot

from Optical_Web.geometry.lanes import LaneLayout
from Optical_Web.session import ViewerSession

logger = logging.getLogger(__name__)


class TimelineModel(QObject):
    """Drive a :class:`ViewerSession` from time slider and selection controls.

    Every change that dirties the session triggers a refresh; the resulting
    layout is pushed to ``view`` (anything with ``set_layout``) and announced
    through :attr:`layoutChanged`.
    """

    timeChanged = Signal(float)
    highlightChanged = Signal(int)
    layoutChanged = Signal()
    notFound = Signal(int)

    def __init__(self, session: ViewerSession | None = None, view=None) -> None:
        super().__init__()
        self._session = session or ViewerSession()
        self._view = view

    @property
    def session(self) -> ViewerSession:
        return self._session

    def set_view(self, view) -> None:
        """Attach a renderer and push the current layout to it."""
        self._view = view
        if view is not None:
            view.set_layout(self._session.refresh())

    # ------------------------------------------------------------------
    def _get_time(self) -> float:
        return self._session.time

    def _set_time(self, value: float) -> None:
        if self._session.time != value:
            self._session.set_time(value)
            self.timeChanged.emit(self._session.time)
            self._push()

    time = Property(float, _get_time, _set_time, notify=timeChanged)

    def _get_highlighted(self) -> int:
        selection = self._session.highlight
        return selection.selected_service_id if selection else -1

    highlightedService = Property(int, _get_highlighted, notify=highlightChanged)

    def _get_services(self) -> List[Dict[str, Union[int, float, str]]]:
        """Expose services present at the current time for list views."""
        return [
            {
                "id": sid,
                "source": s.source_id,
                "destination": s.destination_id,
                "wavelength": s.wavelength,
                "arrival": s.arrival_time,
                "departure": s.departure_time,
            }
            for sid, s in sorted(self._session.snapshot.items())
        ]

    services = Property("QVariant", _get_services, notify=layoutChanged)

    # ------------------------------------------------------------------
    @Slot(float)
    def seek(self, value: float) -> None:
        """Move the query time to ``value``."""
        self._set_time(float(value))

    @Slot(int)
    def highlight(self, service_id: int) -> None:
        """Highlight ``service_id``; emits :attr:`notFound` on a miss."""
        if not self._session.select_service(service_id):
            self.notFound.emit(service_id)
            return
        self.highlightChanged.emit(service_id)
        self.timeChanged.emit(self._session.time)
        self._push()

    @Slot()
    def clearHighlight(self) -> None:
        if self._session.highlight is None:
            return
        self._session.clear_highlight()
        self.highlightChanged.emit(-1)
        self._push()

    # ------------------------------------------------------------------
    def current_layout(self) -> LaneLayout:
        return self._session.refresh()

    def _push(self) -> None:
        if not self._session.dirty:
            return
        lane_layout = self._session.refresh()
        if self._view is not None:
            self._view.set_layout(lane_layout)
        self.layoutChanged.emit()
