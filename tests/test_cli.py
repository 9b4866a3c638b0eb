import json
import sys

import pytest

from Optical_Web.main import MainService
from ow.cli import main


def _event(kind, timestamp, sid, details):
    return {
        "timestamp": timestamp,
        "event_type": kind,
        "service_id": sid,
        "details": details,
    }


def _details(sid, path, arrival, departure=10.0, wavelength=5, **extra):
    data = {
        "service_id": sid,
        "source_id": path[0],
        "destination_id": path[-1],
        "arrival_time": arrival,
        "departure_time": departure,
        "path": list(path),
        "wavelength": wavelength,
    }
    data.update(extra)
    return data


@pytest.fixture
def topology_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    doc = {
        "nodes": [
            {"id": "A", "x": 0, "y": 0},
            {"id": "B", "x": 100, "y": 0},
            {"id": "C", "x": 100, "y": 100},
        ],
        "links": [{"from": "A", "to": "B"}, {"from": "B", "to": "C"}],
        "events": [
            _event("ALLOCATION", 1.0, 1, _details(1, ["A", "B", "C"], 1.0)),
            _event("ALLOCATION", 2.0, 2, _details(2, ["A", "B"], 2.0, wavelength=9)),
            _event("ALLOCATION", 3.0, 4, _details(4, ["B", "C"], 8.0)),
            _event(
                "REALLOCATION",
                4.0,
                3,
                _details(3, ["A", "B", "C"], 4.0, wavelength=7, defrag_service_id=1),
            ),
            _event("RELEASE_EXPIRED", 5.0, 1, {"departure_time": 5.0}),
        ],
    }
    path = tmp_path / "topology.json"
    path.write_text(json.dumps(doc))
    return path


def test_services_lists_active_services(topology_file, capsys):
    main(["services", str(topology_file), "--time", "4.5"])
    rows = json.loads(capsys.readouterr().out)
    assert [r["service_id"] for r in rows] == [1, 2, 3]

    main(["services", str(topology_file), "--time", "6"])
    rows = json.loads(capsys.readouterr().out)
    assert [r["service_id"] for r in rows] == [2, 3]
    assert rows[1]["path"] == ["A", "B", "C"]


def test_services_all_includes_inactive(topology_file, capsys):
    main(["services", str(topology_file), "--time", "4.5", "--all"])
    rows = json.loads(capsys.readouterr().out)
    assert [r["service_id"] for r in rows] == [1, 2, 3, 4]


def test_services_rejects_unknown_flags(topology_file):
    with pytest.raises(SystemExit):
        main(["services", str(topology_file), "--time", "1", "--bogus"])


def test_query_highlight_jumps_to_creation(topology_file, tmp_path, capsys):
    out = tmp_path / "layout.json"
    main(
        [
            "query",
            str(topology_file),
            "--highlight",
            "1",
            "--output",
            str(out),
        ]
    )
    summary = json.loads(capsys.readouterr().out)
    assert summary["time"] == pytest.approx(1.001)
    assert summary["services"] == [1]
    assert summary["highlighted"] == [1, 3]
    assert summary["nodes"] == 3
    assert summary["boundary_segments"] == 4
    assert summary["lane_segments"] == 0
    assert summary["highlight_quads"] == 3
    assert summary["labels"] == 3

    layout = json.loads(out.read_text())
    assert layout["highlighted_service_ids"] == [1, 3]
    assert [lbl["content"] for lbl in layout["labels"]] == ["1", "2", "3"]


def test_query_unknown_highlight_falls_back(topology_file, caplog):
    summary = MainService(
        argv=[str(topology_file), "--time", "4.5", "--highlight", "99"]
    ).run()
    assert summary["highlighted"] == []
    assert summary["services"] == [1, 2, 3, 4]
    # service 4 is present but has not arrived yet
    assert summary["lane_segments"] == 3 + 1 + 3
    assert "99" in caplog.text


def test_query_uses_config_topology(topology_file, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"topology_file: {topology_file.name}\nmax_wavelengths: 16\n")
    summary = MainService(argv=["--config", str(cfg), "--time", "2.5"]).run()
    assert summary["services"] == [1, 2]
