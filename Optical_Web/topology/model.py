from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from ..config import Config
from .types import ConnectionData, ElementData, LinkData, NodeData


@dataclass(frozen=True)
class Node:
    """Topology vertex drawn as a circle."""

    id: str
    x: float
    y: float
    radius: float = field(default_factory=lambda: Config.node_display_radius)

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class Link:
    """Physical link between two nodes; carries no traffic by itself."""

    source: str
    target: str
    id: str = ""


@dataclass(frozen=True)
class TopologyStore:
    """Immutable node and link lists of a loaded network.

    A reload builds a new store instead of mutating the old one, so any
    geometry derived from a previous store stays consistent with it.
    """

    nodes: Tuple[Node, ...] = ()
    links: Tuple[Link, ...] = ()
    _index: Dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "links", tuple(self.links))
        index: Dict[str, int] = {}
        for i, node in enumerate(self.nodes):
            if node.id in index:
                raise ValueError(f"duplicate node id {node.id!r}")
            index[node.id] = i
        object.__setattr__(self, "_index", index)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def index_of(self, node_id: str) -> int | None:
        """Return the position of ``node_id`` in :attr:`nodes` if present."""
        return self._index.get(node_id)

    def node(self, node_id: str) -> Node | None:
        idx = self._index.get(node_id)
        if idx is None:
            return None
        return self.nodes[idx]

    def node_position(self, node_id: str) -> Tuple[float, float] | None:
        """Return the ``(x, y)`` position for ``node_id`` if present."""
        node = self.node(node_id)
        if node is None:
            return None
        return node.position

    def bounds(self) -> Tuple[float, float, float, float] | None:
        """Return ``(xmin, ymin, xmax, ymax)`` over node rims or ``None``."""
        if not self.nodes:
            return None
        xmin = min(n.x - n.radius for n in self.nodes)
        ymin = min(n.y - n.radius for n in self.nodes)
        xmax = max(n.x + n.radius for n in self.nodes)
        ymax = max(n.y + n.radius for n in self.nodes)
        return xmin, ymin, xmax, ymax

    @classmethod
    def from_records(
        cls, nodes: Iterable[NodeData], links: Iterable[LinkData]
    ) -> "TopologyStore":
        """Build a store from plain ``{id, x, y}`` / ``{from, to, id}`` records."""
        built_nodes: List[Node] = [
            Node(
                id=str(n["id"]),
                x=float(n.get("x", 0.0)),
                y=float(n.get("y", 0.0)),
                radius=float(n.get("radius", Config.node_display_radius)),
            )
            for n in nodes
        ]
        built_links: List[Link] = [
            Link(source=str(l["from"]), target=str(l["to"]), id=str(l.get("id", "")))
            for l in links
        ]
        return cls(tuple(built_nodes), tuple(built_links))

    @classmethod
    def from_elements(
        cls,
        elements: Iterable[ElementData],
        connections: Iterable[ConnectionData],
    ) -> "TopologyStore":
        """Build a store from network-export ``elements`` and ``connections``.

        Element locations use a y-up convention; the y axis is flipped so the
        layout works in screen orientation.
        """
        built_nodes = []
        for element in elements:
            location = element.get("metadata", {}).get("location", {})
            built_nodes.append(
                Node(
                    id=str(element["element_id"]),
                    x=float(location.get("x", 0.0)),
                    y=-float(location.get("y", 0.0)),
                    radius=Config.node_display_radius,
                )
            )
        built_links = [
            Link(
                source=str(c["from_node"]),
                target=str(c["to_node"]),
                id=str(c.get("connection_id", "")),
            )
            for c in connections
        ]
        return cls(tuple(built_nodes), tuple(built_links))


__all__ = ["Link", "Node", "TopologyStore"]
