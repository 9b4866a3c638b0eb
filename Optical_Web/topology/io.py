"""File IO helpers for :mod:`Optical_Web.topology`."""

from __future__ import annotations

import json
import logging
from typing import Any, Tuple

from ..timeline.events import EventLog
from .model import TopologyStore
from .types import TopologyDict

logger = logging.getLogger(__name__)


def load_topology(path: str) -> Tuple[TopologyStore, EventLog]:
    """Load a topology file from ``path``.

    Returns the :class:`TopologyStore` and the :class:`EventLog` stored
    alongside it. An absent timeline yields an empty log.
    """
    with open(path) as f:
        data = json.load(f)
    return parse_topology(data)


def parse_topology(data: TopologyDict) -> Tuple[TopologyStore, EventLog]:
    """Build the store and event log from already decoded JSON ``data``."""
    _validate_topology(data)
    if "elements" in data:
        store = TopologyStore.from_elements(
            data["elements"], data.get("connections", [])
        )
        records = data.get("defrag_timeline_events", [])
    else:
        store = TopologyStore.from_records(data["nodes"], data.get("links", []))
        records = data.get("events", [])
    events = EventLog.from_records(records)
    logger.info(
        "Loaded topology with %d nodes, %d links and %d events",
        len(store.nodes),
        len(store.links),
        len(events),
    )
    return store, events


def _validate_topology(data: Any) -> None:
    if not isinstance(data, dict):
        raise ValueError("Topology file must contain an object")
    if "elements" in data:
        nodes_key, links_key, events_key = (
            "elements",
            "connections",
            "defrag_timeline_events",
        )
        node_id, link_ends = "element_id", ("from_node", "to_node")
    elif "nodes" in data:
        nodes_key, links_key, events_key = "nodes", "links", "events"
        node_id, link_ends = "id", ("from", "to")
    else:
        raise ValueError("Topology file must contain 'nodes' or 'elements'")
    if not isinstance(data[nodes_key], list):
        raise ValueError(f"'{nodes_key}' must be a list")
    for node in data[nodes_key]:
        if not isinstance(node, dict) or node_id not in node:
            raise ValueError(f"'{nodes_key}' entries must be objects with '{node_id}'")
    links = data.get(links_key, [])
    if not isinstance(links, list):
        raise ValueError(f"'{links_key}' must be a list")
    for link in links:
        if not isinstance(link, dict):
            raise ValueError(f"'{links_key}' entries must be objects")
        if any(end not in link for end in link_ends):
            raise ValueError(f"link missing '{link_ends[0]}' or '{link_ends[1]}'")
    events = data.get(events_key, [])
    if not isinstance(events, list):
        raise ValueError(f"'{events_key}' must be a list")
    for event in events:
        if not isinstance(event, dict):
            raise ValueError(f"'{events_key}' entries must be objects")
        details = event.get("details")
        if details is not None and not isinstance(details, dict):
            raise ValueError("event 'details' must be an object")
