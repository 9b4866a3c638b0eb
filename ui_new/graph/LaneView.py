from __future__ import annotations

"""Scene-graph renderer for wavelength lane layouts."""

import math
from typing import Dict, List, Tuple

from PySide6.QtGui import QWheelEvent
from PySide6.QtQml import QmlElement
from PySide6.QtQuick import (
    QQuickItem,
    QSGGeometry,
    QSGGeometryNode,
    QSGNode,
    QSGVertexColorMaterial,
)
from PySide6.QtCore import Property, QRectF, Signal

from Optical_Web.geometry.color import linear_to_srgb_u8
from Optical_Web.geometry.lanes import LaneLayout

QML_IMPORT_NAME = "OpticalLanes"
QML_IMPORT_MAJOR_VERSION = 1

#: ``(x, y, r, g, b, a)`` with 8-bit sRGB color
ColoredVertex = Tuple[float, float, int, int, int, int]


def _vertex(position, color) -> ColoredVertex:
    r, g, b, a = linear_to_srgb_u8(color)
    return float(position[0]), float(position[1]), r, g, b, a


def circle_triangles(
    center: Tuple[float, float], radius: float, color, segments: int = 32
) -> List[ColoredVertex]:
    """Return a triangle list approximating a filled circle."""

    cx, cy = center
    rgba = linear_to_srgb_u8(color)
    rim = [
        (
            cx + radius * math.cos(2 * math.pi * i / segments),
            cy + radius * math.sin(2 * math.pi * i / segments),
        )
        for i in range(segments + 1)
    ]
    verts: List[ColoredVertex] = []
    for (x0, y0), (x1, y1) in zip(rim, rim[1:]):
        verts.append((cx, cy, *rgba))
        verts.append((x0, y0, *rgba))
        verts.append((x1, y1, *rgba))
    return verts


@QmlElement
class LaneView(QQuickItem):
    """QQuickItem drawing node circles, lane lines and highlight quads.

    Geometry arrives as a finished :class:`LaneLayout`; the item only turns
    it into vertex-colored scene-graph nodes. Each :meth:`set_layout` call
    replaces all buffers, nothing is patched in place.
    """

    def __init__(self, parent: QQuickItem | None = None) -> None:
        super().__init__(parent)
        self.setFlag(QQuickItem.ItemHasContents, True)
        self._layout = LaneLayout()
        self._line_vertices: List[ColoredVertex] = []
        self._quad_vertices: List[ColoredVertex] = []
        self._node_vertices: List[ColoredVertex] = []
        self._line_geom: QSGGeometryNode | None = None
        self._quad_geom: QSGGeometryNode | None = None
        self._node_geom: QSGGeometryNode | None = None
        self._dirty = True
        self._zoom = 1.0
        self._circle_segments = 32

    layoutChanged = Signal()
    zoomChanged = Signal(float)

    def _get_label_model(self) -> List[Dict[str, object]]:
        """Return label hints for QML text delegates."""
        return [
            {"x": lbl.position[0], "y": lbl.position[1], "text": lbl.content}
            for lbl in self._layout.labels
        ]

    labelModel = Property("QVariantList", _get_label_model, notify=layoutChanged)

    def set_layout(self, lane_layout: LaneLayout) -> None:
        """Replace the drawn geometry with ``lane_layout`` and schedule a redraw."""

        self._layout = lane_layout
        self._line_vertices = [
            _vertex(v.position, v.color) for v in lane_layout.line_vertices
        ]
        self._quad_vertices = [
            _vertex(v.position, v.color) for v in lane_layout.triangle_vertices()
        ]
        self._node_vertices = []
        for node in lane_layout.nodes:
            self._node_vertices.extend(
                circle_triangles(
                    node.position, node.radius, node.color, self._circle_segments
                )
            )
        self._dirty = True
        rect = self._bounding_rect()
        self.setImplicitWidth(rect.right())
        self.setImplicitHeight(rect.bottom())
        self.update()
        self.layoutChanged.emit()

    def _get_zoom(self) -> float:
        return self._zoom

    def _set_zoom(self, value: float) -> None:
        """Update zoom level, scale view and emit change signals."""
        self._zoom = value
        self.setScale(self._zoom)
        self.update()
        self.zoomChanged.emit(self._zoom)

    zoom = Property(float, _get_zoom, _set_zoom, notify=zoomChanged)

    # --- QQuickItem overrides -------------------------------------------------
    frameRendered = Signal()

    def wheelEvent(
        self, event: QWheelEvent
    ) -> None:  # pragma: no cover - Qt binding detail
        """Zoom the view in response to mouse wheel events."""
        factor = 1.0 + event.angleDelta().y() / 1200.0
        self.zoom = max(0.1, min(10.0, self._zoom * factor))
        event.accept()

    def updatePaintNode(
        self, old_node: QSGNode | None, data
    ) -> QSGNode:  # pragma: no cover - Qt binding detail
        root = old_node or QSGNode()
        if self._dirty:
            self._node_geom = self._refill(
                root, self._node_geom, self._node_vertices, QSGGeometry.DrawTriangles
            )
            self._line_geom = self._refill(
                root, self._line_geom, self._line_vertices, QSGGeometry.DrawLines
            )
            self._quad_geom = self._refill(
                root, self._quad_geom, self._quad_vertices, QSGGeometry.DrawTriangles
            )
            self._dirty = False
        self.frameRendered.emit()
        return root

    # --- helpers --------------------------------------------------------------
    def _refill(
        self,
        parent: QSGNode,
        geom: QSGGeometryNode | None,
        vertices: List[ColoredVertex],
        mode,
    ) -> QSGGeometryNode:  # pragma: no cover - Qt binding detail
        """Upload ``vertices`` into ``geom``, creating the node on first use."""

        geometry = QSGGeometry(
            QSGGeometry.defaultAttributes_ColoredPoint2D(), len(vertices)
        )
        geometry.setDrawingMode(mode)
        geometry.setLineWidth(1.0)
        data = geometry.vertexDataAsColoredPoint2D()
        for i, (x, y, r, g, b, a) in enumerate(vertices):
            data[i].set(x, y, r, g, b, a)
        if geom is None:
            geom = QSGGeometryNode()
            geom.setMaterial(QSGVertexColorMaterial())
            geom.setFlag(QSGNode.OwnsMaterial, True)
            parent.appendChildNode(geom)
        geom.setGeometry(geometry)
        geom.setFlag(QSGNode.OwnsGeometry, True)
        geom.markDirty(QSGNode.DirtyGeometry)
        return geom

    def _bounding_rect(self) -> QRectF:
        """Return bounding rectangle around all node rims."""

        nodes = self._layout.nodes
        if not nodes:
            return QRectF()
        xmin = min(n.position[0] - n.radius for n in nodes)
        xmax = max(n.position[0] + n.radius for n in nodes)
        ymin = min(n.position[1] - n.radius for n in nodes)
        ymax = max(n.position[1] + n.radius for n in nodes)
        return QRectF(xmin, ymin, xmax - xmin, ymax - ymin)
