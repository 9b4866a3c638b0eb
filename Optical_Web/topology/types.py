from __future__ import annotations

from typing import Any, Dict, List, TypedDict

# Reusable typed mappings for topology and timeline JSON files

NodeData = TypedDict(
    "NodeData",
    {
        "id": str,
        "x": float,
        "y": float,
        "radius": float,
    },
    total=False,
)

LinkData = TypedDict(
    "LinkData",
    {
        "from": str,
        "to": str,
        "id": str,
    },
    total=False,
)

LocationData = TypedDict("LocationData", {"x": float, "y": float})

ElementData = TypedDict(
    "ElementData",
    {
        "name": str,
        "type": str,
        "type_variety": str,
        "metadata": Dict[str, LocationData],
        "element_id": str,
    },
    total=False,
)

ConnectionData = TypedDict(
    "ConnectionData",
    {
        "from_node": str,
        "to_node": str,
        "connection_id": str,
    },
    total=False,
)

ServiceData = TypedDict(
    "ServiceData",
    {
        "service_id": int,
        "source_id": str,
        "destination_id": str,
        "arrival_time": float,
        "departure_time": float,
        "bit_rate": float,
        "power": float,
        "path": List[str],
        "wavelength": int,
        "snr_requirement": float,
        "gsnr": float,
        "utilization": float,
    },
    total=False,
)

EventData = TypedDict(
    "EventData",
    {
        "event_type": str,
        "timestamp": float,
        "service_id": int,
        "details": Dict[str, Any],
    },
    total=False,
)

TopologyDict = TypedDict(
    "TopologyDict",
    {
        "nodes": List[NodeData],
        "links": List[LinkData],
        "events": List[EventData],
        "elements": List[ElementData],
        "connections": List[ConnectionData],
        "defrag_timeline_events": List[EventData],
    },
    total=False,
)
