# main.py

"""Entry point computing lane geometry for a topology at a point in time."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from Optical_Web.config import Config
from Optical_Web.session import ViewerSession
from Optical_Web.topology.io import load_topology


def _configure_logging(level: str | None = None, filename: str | None = None) -> None:
    """Configure application logging and capture uncaught exceptions."""

    logging.basicConfig(
        level=getattr(logging, (level or Config.log_verbosity).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=filename,
        filemode="a",
    )

    def _log_excepthook(exc_type, exc, tb) -> None:
        logging.getLogger(__name__).exception(
            "Uncaught exception", exc_info=(exc_type, exc, tb)
        )

    sys.excepthook = _log_excepthook


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ow query", description="Lay out wavelength lanes at a point in time"
    )
    parser.add_argument("topology", nargs="?", help="Topology JSON file")
    parser.add_argument("--config", help="JSON or YAML configuration file")
    parser.add_argument("--time", type=float, default=0.0, help="Query time")
    parser.add_argument(
        "--highlight",
        type=int,
        help="Service id to highlight; the query jumps to its creation time",
    )
    parser.add_argument("--output", help="Write the full layout as JSON here")
    parser.add_argument("--log-level", help="Logging level, e.g. debug")
    return parser


class MainService:
    """Load a topology, replay its timeline and emit the resulting layout."""

    def __init__(self, argv: Optional[List[str]] = None) -> None:
        self.args = _build_parser().parse_args(argv)

    def run(self) -> dict[str, Any]:
        """Execute the query and return a summary of the produced geometry."""
        args = self.args
        if args.config:
            Config.load_from_file(args.config)
        _configure_logging(args.log_level, Config.log_file)
        logger = logging.getLogger(__name__)

        path = args.topology or Config.topology_file
        if not path:
            raise ValueError("No topology file given and none configured")
        topology, events = load_topology(path)
        session = ViewerSession(topology, events, time=args.time)
        if args.highlight is not None and not session.select_service(args.highlight):
            logger.warning("Service %s not found; showing plain layout", args.highlight)
        result = session.refresh()

        summary = {
            "time": session.time,
            "services": sorted(session.snapshot),
            "highlighted": sorted(result.highlighted_service_ids),
            "nodes": len(result.nodes),
            "boundary_segments": len(result.boundaries) // 2,
            "lane_segments": len(result.service_lines) // 2,
            "highlight_quads": len(result.highlight_quads),
            "labels": len(result.labels),
        }
        if args.output:
            with open(args.output, "w") as f:
                json.dump(result.to_dict(), f, indent=2)
            logger.info("Wrote layout to %s", args.output)
        print(json.dumps(summary, indent=2))
        return summary


if __name__ == "__main__":
    MainService().run()
