import logging
import math

import numpy as np
import pytest

from Optical_Web.config import Config
from Optical_Web.geometry.color import srgb_u8_to_linear
from Optical_Web.geometry.lanes import (
    clamp_wavelength,
    elbow_segment,
    hop_segment,
    lane_angle,
    layout,
    link_boundaries,
    spread_factor,
)
from Optical_Web.timeline.events import Service
from Optical_Web.topology.model import Link, Node, TopologyStore


def _topology():
    nodes = [
        Node("A", 0.0, 0.0),
        Node("B", 100.0, 100.0),
        Node("C", 200.0, 0.0),
        Node("D", 300.0, 80.0),
    ]
    links = [Link("A", "B", "ab"), Link("B", "C", "bc"), Link("C", "D", "cd")]
    return TopologyStore(tuple(nodes), tuple(links))


def _service(sid, path, wavelength=10, arrival=0.0, departure=100.0):
    return Service(sid, path[0], path[-1], arrival, departure, tuple(path), wavelength)


def _positions(vertices):
    return [v.position for v in vertices]


def test_spread_factor_symmetry_odd_capacity():
    w = 81
    assert spread_factor((w - 1) // 2, w) == 0.0
    for i in range(w):
        assert spread_factor(i, w) == -spread_factor(w - 1 - i, w)


def test_spread_factor_symmetry_even_capacity():
    w = Config.max_wavelengths
    assert spread_factor(0, w) == -1.0
    assert spread_factor(w - 1, w) == 1.0
    for i in range(w):
        assert spread_factor(i, w) == -spread_factor(w - 1 - i, w)


def test_lane_angles_stay_inside_boundary():
    spread = Config.spread_angle()
    for i in range(Config.max_wavelengths):
        angle = lane_angle(i, Config.max_wavelengths, spread)
        assert abs(angle) <= Config.link_boundary_angle * 0.95
        assert abs(angle) < Config.link_boundary_angle


def test_single_channel_capacity_centres_lane():
    assert spread_factor(0, 1) == 0.0


def test_clamp_wavelength_warns(caplog):
    with caplog.at_level(logging.WARNING):
        assert clamp_wavelength(200, 80, service_id=4) == 79
        assert clamp_wavelength(-3, 80) == 0
    assert "clamping" in caplog.text
    caplog.clear()
    assert clamp_wavelength(12, 80) == 12
    assert caplog.text == ""


def test_link_boundaries_start_at_node_rim():
    a, b = np.array([0.0, 0.0]), np.array([100.0, 0.0])
    alpha = math.pi / 16
    upper, lower = link_boundaries(a, b, 20.0, alpha, 1e-7)
    assert np.allclose(upper[0], [20 * math.cos(alpha), 20 * math.sin(alpha)])
    assert np.allclose(upper[1], [100 - 20 * math.cos(alpha), 20 * math.sin(alpha)])
    assert np.allclose(lower[0], [20 * math.cos(alpha), -20 * math.sin(alpha)])
    assert np.allclose(lower[1], [100 - 20 * math.cos(alpha), -20 * math.sin(alpha)])
    for p in (*upper, *lower):
        centre = a if p[0] < 50 else b
        assert np.hypot(*(p - centre)) == pytest.approx(20.0)


def test_centre_lane_runs_along_axis():
    a, b = np.array([0.0, 0.0]), np.array([100.0, 0.0])
    start, end = hop_segment(a, b, 20.0, 0.0, 1e-7)
    assert np.allclose(start, [20.0, 0.0])
    assert np.allclose(end, [80.0, 0.0])


def test_hop_is_same_lane_in_either_direction():
    a, b = np.array([0.0, 0.0]), np.array([100.0, 50.0])
    angle = 0.1
    forward = hop_segment(a, b, 20.0, angle, 1e-7)
    backward = hop_segment(b, a, 20.0, angle, 1e-7)
    assert np.allclose(forward[0], backward[1])
    assert np.allclose(forward[1], backward[0])


def test_elbow_joins_consecutive_hops():
    a, m, c = np.array([0.0, 0.0]), np.array([100.0, 100.0]), np.array([200.0, 0.0])
    angle = -0.12
    first = hop_segment(a, m, 20.0, angle, 1e-7)
    second = hop_segment(m, c, 20.0, angle, 1e-7)
    elbow = elbow_segment(a, m, c, 20.0, angle, 1e-7)
    assert np.allclose(elbow[0], first[1])
    assert np.allclose(elbow[1], second[0])
    for p in elbow:
        assert np.hypot(*(p - m)) == pytest.approx(20.0)


def test_layout_counts_boundaries_hops_and_elbows():
    topo = _topology()
    services = {1: _service(1, ["A", "B", "C", "D"])}
    result = layout(topo, services, query_time=1.0)
    assert len(result.boundaries) == 3 * 2 * 2
    # three hops and two elbows
    assert len(result.service_lines) == 5 * 2
    assert result.highlight_quads == ()
    assert result.labels == ()
    assert len(result.nodes) == 4


def test_layout_filters_inactive_services():
    topo = _topology()
    services = {
        1: _service(1, ["A", "B"], arrival=5.0, departure=10.0),
    }
    assert layout(topo, services, query_time=4.0).service_lines == ()
    assert len(layout(topo, services, query_time=5.0).service_lines) == 2
    assert layout(topo, services, query_time=10.0).service_lines == ()


def test_layout_is_deterministic():
    topo = _topology()
    services = {
        2: _service(2, ["B", "C"], wavelength=3),
        1: _service(1, ["A", "B", "C"], wavelength=40),
    }
    assert layout(topo, services, query_time=1.0) == layout(
        topo, list(reversed(list(services.values()))), query_time=1.0
    )


def test_out_of_range_wavelength_is_clamped(caplog):
    topo = _topology()
    clamped = layout(topo, [_service(1, ["A", "B"], wavelength=500)], query_time=0.0)
    top = layout(
        topo,
        [_service(1, ["A", "B"], wavelength=Config.max_wavelengths - 1)],
        query_time=0.0,
    )
    assert clamped.service_lines == top.service_lines
    assert "clamping" in caplog.text


def test_degenerate_link_and_hop_emit_nothing():
    nodes = (Node("A", 5.0, 5.0), Node("A2", 5.0, 5.0))
    topo = TopologyStore(nodes, (Link("A", "A2"),))
    result = layout(topo, [_service(1, ["A", "A2"])], query_time=0.0)
    assert result.boundaries == ()
    assert result.service_lines == ()
    for v in result.line_vertices:
        assert all(math.isfinite(c) for c in v.position)


def test_unknown_nodes_are_skipped_with_warning(caplog):
    topo = TopologyStore(
        (Node("A", 0.0, 0.0), Node("B", 100.0, 0.0)),
        (Link("A", "B"), Link("A", "Z")),
    )
    with caplog.at_level(logging.WARNING):
        result = layout(topo, [_service(1, ["A", "B", "Z"])], query_time=0.0)
    assert len(result.boundaries) == 4
    assert len(result.service_lines) == 2
    assert "non-existent node" in caplog.text


def test_highlight_isolation():
    topo = _topology()
    services = {
        1: _service(1, ["A", "B", "C"], wavelength=5),
        2: _service(2, ["B", "C", "D"], wavelength=60),
    }
    plain = layout(topo, services, query_time=1.0)
    lit = layout(topo, services, [1], query_time=1.0)
    only_two = layout(topo, {2: services[2]}, query_time=1.0)

    assert lit.boundaries == plain.boundaries
    assert _positions(lit.service_lines) == _positions(only_two.service_lines)
    assert {v.color for v in lit.service_lines} != {
        v.color for v in plain.service_lines
    }
    # two hops and one elbow for service 1
    assert len(lit.highlight_quads) == 3
    assert all(q.service_id == 1 for q in lit.highlight_quads)

    plain_one = layout(topo, {1: services[1]}, query_time=1.0)
    starts = _positions(plain_one.service_lines)[::2]
    ends = _positions(plain_one.service_lines)[1::2]
    for quad, start, end in zip(lit.highlight_quads, starts, ends):
        c0, c1, c2, c3 = (np.array(c) for c in quad.corners)
        assert np.allclose((c0 + c3) / 2, start)
        assert np.allclose((c1 + c2) / 2, end)
        assert np.hypot(*(c3 - c0)) == pytest.approx(
            2 * Config.highlight_half_thickness
        )


def test_highlight_recolors_path_nodes_and_adds_labels():
    topo = _topology()
    services = {1: _service(1, ["A", "B", "C"])}
    result = layout(topo, services, {1}, query_time=1.0)
    highlight = srgb_u8_to_linear(Config.node_highlight_color)
    default = srgb_u8_to_linear(Config.node_color)
    colors = {n.id: n.color for n in result.nodes}
    assert colors == {"A": highlight, "B": highlight, "C": highlight, "D": default}
    assert [(lbl.content, lbl.node_id) for lbl in result.labels] == [
        ("1", "A"),
        ("2", "B"),
        ("3", "C"),
    ]
    assert result.labels[1].position == (100.0, 100.0)


def test_triangle_vertices_expand_quads():
    topo = _topology()
    result = layout(topo, {1: _service(1, ["A", "B"])}, {1}, query_time=0.0)
    tris = result.triangle_vertices()
    assert len(tris) == 6
    corners = result.highlight_quads[0].corners
    assert [v.position for v in tris] == [
        corners[0],
        corners[1],
        corners[2],
        corners[0],
        corners[2],
        corners[3],
    ]


def test_layout_to_dict_is_plain_data():
    import json

    topo = _topology()
    result = layout(topo, {1: _service(1, ["A", "B"])}, {1}, query_time=0.0)
    data = json.loads(json.dumps(result.to_dict()))
    assert data["highlighted_service_ids"] == [1]
    assert len(data["highlight_quads"]) == 1
    assert len(data["nodes"]) == 4


def test_horizontal_hop_mirrors_when_reversed():
    # dir.y == 0 takes side +1 in both directions
    a, b = np.array([0.0, 0.0]), np.array([100.0, 0.0])
    angle = 0.19
    forward = hop_segment(a, b, 20.0, angle, 1e-7)
    backward = hop_segment(b, a, 20.0, angle, 1e-7)
    assert forward[0][0] == pytest.approx(backward[1][0])
    assert forward[0][1] == pytest.approx(-backward[1][1])
    assert forward[0][1] > 0.0
