"""Console entrypoint for the ``ow`` command."""

from __future__ import annotations

import argparse
import json
from typing import List, Optional

from Optical_Web.config import Config
from Optical_Web.timeline.replay import active_services, reconstruct
from Optical_Web.topology.io import load_topology


def main(argv: Optional[List[str]] = None) -> None:
    """Parse ``ow`` CLI arguments and dispatch to the sub-command."""

    parser = argparse.ArgumentParser(prog="ow")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("query", help="Lay out lanes at a time", add_help=False)
    services_p = sub.add_parser("services", help="List services active at a time")
    services_p.add_argument("topology", help="Topology JSON file")
    services_p.add_argument("--time", type=float, required=True, help="Query time")
    services_p.add_argument("--config", help="JSON or YAML configuration file")
    services_p.add_argument(
        "--all",
        action="store_true",
        help="Include services present in the replay but outside their window",
    )

    args, rest = parser.parse_known_args(argv)
    if args.command == "query":
        from Optical_Web.main import MainService

        MainService(argv=rest).run()
    elif args.command == "services":
        if rest:
            parser.error(f"unrecognized arguments: {' '.join(rest)}")
        if args.config:
            Config.load_from_file(args.config)
        _, events = load_topology(args.topology)
        snapshot = reconstruct(events, args.time)
        if not args.all:
            snapshot = active_services(snapshot, args.time)
        rows = [snapshot[sid].to_dict() for sid in sorted(snapshot)]
        print(json.dumps(rows, indent=2))


if __name__ == "__main__":
    main()
