"""Static network topology: nodes, links and file ingest."""

from .model import Link, Node, TopologyStore

__all__ = ["Link", "Node", "TopologyStore"]
