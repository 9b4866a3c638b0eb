"""Renderer-facing geometry dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

Point = Tuple[float, float]
Color = Tuple[float, float, float, float]


@dataclass(frozen=True)
class NodeInstance:
    """Circle drawn for a topology node."""

    id: str
    position: Point
    radius: float
    color: Color
    highlighted: bool = False


@dataclass(frozen=True)
class LineVertex:
    """One end of a line-list segment."""

    position: Point
    color: Color


@dataclass(frozen=True)
class Quad:
    """Thick segment as four corners ordered around the quad."""

    corners: Tuple[Point, Point, Point, Point]
    color: Color
    service_id: int

    #: Corner indices of the two triangles covering the quad
    INDICES = (0, 1, 2, 0, 2, 3)

    def triangles(self) -> Tuple[LineVertex, ...]:
        """Return six vertices forming the two triangles of the quad."""
        return tuple(LineVertex(self.corners[i], self.color) for i in self.INDICES)


@dataclass(frozen=True)
class TextLabel:
    """Label hint placed at a node of a highlighted path."""

    content: str
    position: Point
    radius: float
    node_id: str
    service_id: int


def to_dict(obj: Any) -> Dict[str, Any]:
    """Return a JSON-compatible mapping for one geometry record."""

    if isinstance(obj, NodeInstance):
        return {
            "id": obj.id,
            "position": list(obj.position),
            "radius": obj.radius,
            "color": list(obj.color),
            "highlighted": obj.highlighted,
        }
    if isinstance(obj, LineVertex):
        return {"position": list(obj.position), "color": list(obj.color)}
    if isinstance(obj, Quad):
        return {
            "service_id": obj.service_id,
            "corners": [list(c) for c in obj.corners],
            "color": list(obj.color),
        }
    if isinstance(obj, TextLabel):
        return {
            "content": obj.content,
            "position": list(obj.position),
            "radius": obj.radius,
            "node_id": obj.node_id,
            "service_id": obj.service_id,
        }
    raise TypeError(f"cannot serialise {type(obj).__name__}")


__all__ = ["Color", "LineVertex", "NodeInstance", "Point", "Quad", "TextLabel", "to_dict"]
