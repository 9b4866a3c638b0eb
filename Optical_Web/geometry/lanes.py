from __future__ import annotations

"""Wavelength lane layout.

Every link is drawn as a cone bounded by two lines rotated ``±α`` from the
link axis at each node rim. Each wavelength channel occupies a fixed angular
slot inside that cone, so services sharing a link never overlap and the same
channel always lands on the same side of the link whichever end is the
source. Paths through intermediate nodes get an elbow segment inside the
node joining the incoming and outgoing slots.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import numpy as np

from ..config import Config
from ..timeline.events import Service
from ..timeline.replay import is_active
from ..topology.model import TopologyStore
from ..view import Color, LineVertex, NodeInstance, Quad, TextLabel, to_dict
from .color import oklch_to_linear, srgb_u8_to_linear, wavelength_hue
from .vec import perpendicular, point, rotate, unit, vec2

logger = logging.getLogger(__name__)

Segment = Tuple[np.ndarray, np.ndarray]


@dataclass(frozen=True)
class LaneLayout:
    """Geometry produced by one layout pass.

    ``boundaries`` and ``service_lines`` hold consecutive vertex pairs for a
    line-list draw; ``highlight_quads`` are drawn as triangles on top.
    """

    nodes: Tuple[NodeInstance, ...] = ()
    boundaries: Tuple[LineVertex, ...] = ()
    service_lines: Tuple[LineVertex, ...] = ()
    highlight_quads: Tuple[Quad, ...] = ()
    labels: Tuple[TextLabel, ...] = ()
    query_time: float | None = None
    highlighted_service_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def line_vertices(self) -> Tuple[LineVertex, ...]:
        """Return all thin-line vertices, boundaries first."""
        return self.boundaries + self.service_lines

    def triangle_vertices(self) -> Tuple[LineVertex, ...]:
        """Return the highlight quads expanded to a triangle list."""
        return tuple(v for q in self.highlight_quads for v in q.triangles())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the layout to plain data suitable for JSON."""
        return {
            "query_time": self.query_time,
            "highlighted_service_ids": sorted(self.highlighted_service_ids),
            "nodes": [to_dict(n) for n in self.nodes],
            "boundaries": [to_dict(v) for v in self.boundaries],
            "service_lines": [to_dict(v) for v in self.service_lines],
            "highlight_quads": [to_dict(q) for q in self.highlight_quads],
            "labels": [to_dict(label) for label in self.labels],
        }


def clamp_wavelength(index: int, max_wavelengths: int, service_id: int | None = None) -> int:
    """Clamp ``index`` into ``[0, max_wavelengths)`` logging a warning if needed."""

    if 0 <= index < max_wavelengths:
        return index
    clamped = min(max(index, 0), max_wavelengths - 1)
    logger.warning(
        "Service %s uses wavelength %s outside 0..%s; clamping to %s",
        service_id,
        index,
        max_wavelengths - 1,
        clamped,
    )
    return clamped


def spread_factor(index: int, max_wavelengths: int) -> float:
    """Return the signed position of ``index`` in ``[-1, 1]``.

    The middle channel of an odd capacity maps to ``0`` and indices
    ``i`` and ``W - 1 - i`` map to opposite values.
    """

    half = (max_wavelengths - 1) / 2.0
    if half == 0:
        return 0.0
    return (index - half) / half


def lane_angle(index: int, max_wavelengths: int, spread_angle: float) -> float:
    """Return the angular offset of channel ``index`` from the link axis."""
    return spread_factor(index, max_wavelengths) * spread_angle


def _side(direction: np.ndarray) -> float:
    # Keeps a channel on one side for either traversal of a non-horizontal
    # link. A horizontal link (y == 0) yields +1 both ways, so its lanes
    # mirror across the axis when the hop direction flips.
    return 1.0 if direction[1] >= 0.0 else -1.0


def link_boundaries(
    source: np.ndarray, target: np.ndarray, radius: float, angle: float, epsilon: float
) -> Tuple[Segment, Segment] | None:
    """Return the upper and lower boundary segments of a link cone."""

    direction = unit(target - source, epsilon)
    if direction is None:
        return None
    r = direction * radius
    upper = (source + rotate(r, angle), target - rotate(r, -angle))
    lower = (source + rotate(r, -angle), target - rotate(r, angle))
    return upper, lower


def hop_segment(
    source: np.ndarray, target: np.ndarray, radius: float, angle: float, epsilon: float
) -> Segment | None:
    """Return the lane segment between two node rims for a channel ``angle``."""

    direction = unit(target - source, epsilon)
    if direction is None:
        return None
    r = direction * radius
    sign = _side(direction)
    start = source + rotate(r, angle * sign)
    end = target - rotate(r, -angle * sign)
    return start, end


def elbow_segment(
    previous: np.ndarray,
    middle: np.ndarray,
    following: np.ndarray,
    radius: float,
    angle: float,
    epsilon: float,
) -> Segment | None:
    """Return the segment inside ``middle`` joining incoming and outgoing lanes."""

    incoming = unit(middle - previous, epsilon)
    outgoing = unit(following - middle, epsilon)
    if incoming is None or outgoing is None:
        return None
    end_of_incoming = middle - rotate(incoming * radius, -angle * _side(incoming))
    start_of_outgoing = middle + rotate(outgoing * radius, angle * _side(outgoing))
    return end_of_incoming, start_of_outgoing


def quad_corners(segment: Segment, half_thickness: float, epsilon: float):
    """Return the four corners of ``segment`` widened by ``half_thickness``."""

    start, end = segment
    direction = unit(end - start, epsilon)
    if direction is None:
        return None
    offset = perpendicular(direction) * half_thickness
    return (
        point(start - offset),
        point(end - offset),
        point(end + offset),
        point(start + offset),
    )


def _lane_color(index: int, state: str) -> Color:
    params = Config.lane_color[state]
    hue = wavelength_hue(
        index, Config.max_wavelengths, Config.hue_span, Config.hue_offset
    )
    return oklch_to_linear(params["lightness"], params["chroma"], hue)


def _service_segments(
    service: Service,
    positions: Mapping[str, np.ndarray],
    angle: float,
    radius: float,
    epsilon: float,
) -> List[Segment]:
    """Return hop and elbow segments for ``service`` in path order."""

    path = service.path
    segments: List[Segment] = []
    for a, b in zip(path, path[1:]):
        if a not in positions or b not in positions:
            logger.warning(
                "Service %s path references non-existent node ID. Segment: %s -> %s",
                service.service_id,
                a,
                b,
            )
            continue
        seg = hop_segment(positions[a], positions[b], radius, angle, epsilon)
        if seg is not None:
            segments.append(seg)
    for a, m, b in zip(path, path[1:], path[2:]):
        if a not in positions or m not in positions or b not in positions:
            continue
        seg = elbow_segment(positions[a], positions[m], positions[b], radius, angle, epsilon)
        if seg is not None:
            segments.append(seg)
    return [s for s in segments if unit(s[1] - s[0], epsilon) is not None]


def layout(
    topology: TopologyStore,
    services: Mapping[int, Service] | Iterable[Service],
    highlighted_service_ids: Iterable[int] = (),
    *,
    query_time: float,
) -> LaneLayout:
    """Compute lane geometry for ``services`` at ``query_time``.

    Parameters
    ----------
    topology:
        Nodes and links of the network.
    services:
        Reconstructed snapshot, either the mapping returned by
        :func:`~Optical_Web.timeline.replay.reconstruct` or an iterable of
        services. Only services active at ``query_time`` are drawn.
    highlighted_service_ids:
        Services drawn as thick quads with brighter colors. While any id is
        given every other service is drawn dimmed.
    query_time:
        Time used for the ``arrival_time <= t < departure_time`` check.
    """

    if isinstance(services, Mapping):
        service_list = list(services.values())
    else:
        service_list = list(services)
    service_list.sort(key=lambda s: s.service_id)
    highlighted = frozenset(highlighted_service_ids)

    epsilon = Config.geometry_epsilon
    radius = Config.node_inner_radius
    boundary_angle = Config.link_boundary_angle
    spread = Config.spread_angle()
    capacity = Config.max_wavelengths

    positions = {n.id: vec2(n.position) for n in topology.nodes}

    # 1. node recoloring
    marked = {
        node_id
        for s in service_list
        if s.service_id in highlighted
        for node_id in s.path
    }
    default_color = srgb_u8_to_linear(Config.node_color)
    highlight_color = srgb_u8_to_linear(Config.node_highlight_color)
    nodes = tuple(
        NodeInstance(
            id=n.id,
            position=n.position,
            radius=n.radius,
            color=highlight_color if n.id in marked else default_color,
            highlighted=n.id in marked,
        )
        for n in topology.nodes
    )

    # 2. link boundaries
    boundary_color = srgb_u8_to_linear(Config.link_boundary_color)
    boundaries: List[LineVertex] = []
    for link in topology.links:
        if link.source not in positions or link.target not in positions:
            logger.warning(
                "Link references non-existent node ID. Source: %s, Target: %s",
                link.source,
                link.target,
            )
            continue
        pair = link_boundaries(
            positions[link.source], positions[link.target], radius, boundary_angle, epsilon
        )
        if pair is None:
            continue
        for start, end in pair:
            boundaries.append(LineVertex(point(start), boundary_color))
            boundaries.append(LineVertex(point(end), boundary_color))

    # 3-7. services
    lines: List[LineVertex] = []
    quads: List[Quad] = []
    labels: List[TextLabel] = []
    half_thickness = Config.highlight_half_thickness
    for service in service_list:
        is_highlighted = service.service_id in highlighted
        if is_highlighted:
            for order, node_id in enumerate(service.path, start=1):
                node = topology.node(node_id)
                if node is None:
                    continue
                labels.append(
                    TextLabel(
                        content=str(order),
                        position=node.position,
                        radius=node.radius,
                        node_id=node_id,
                        service_id=service.service_id,
                    )
                )
        if not is_active(service, query_time):
            continue

        index = clamp_wavelength(service.wavelength, capacity, service.service_id)
        angle = lane_angle(index, capacity, spread)
        if is_highlighted:
            state = "highlighted"
        elif highlighted:
            state = "dimmed"
        else:
            state = "normal"
        color = _lane_color(index, state)

        for seg in _service_segments(service, positions, angle, radius, epsilon):
            if is_highlighted:
                corners = quad_corners(seg, half_thickness, epsilon)
                if corners is not None:
                    quads.append(Quad(corners, color, service.service_id))
            else:
                lines.append(LineVertex(point(seg[0]), color))
                lines.append(LineVertex(point(seg[1]), color))

    logger.debug(
        "Lane layout at t=%s: %d boundary vertices, %d lane vertices, %d quads",
        query_time,
        len(boundaries),
        len(lines),
        len(quads),
    )
    return LaneLayout(
        nodes=nodes,
        boundaries=tuple(boundaries),
        service_lines=tuple(lines),
        highlight_quads=tuple(quads),
        labels=tuple(labels),
        query_time=query_time,
        highlighted_service_ids=highlighted,
    )


__all__ = [
    "LaneLayout",
    "clamp_wavelength",
    "elbow_segment",
    "hop_segment",
    "lane_angle",
    "layout",
    "link_boundaries",
    "quad_corners",
    "spread_factor",
]
