"""
Command-line front end: load a topology CSV, run one protocol, print or save
the routing table.

    route-lib dv    --topology edges.csv
    route-lib ospf  --topology edges.csv --local A --output table.csv
    route-lib eigrp --topology edges.csv --local A
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG, DuplicatePolicy, ImportPolicy
from .errors import ImportRejectedError, NonConvergenceError, UnknownRouterError
from .export import INFINITY_MARKER, table_rows, write_csv
from .importer import load_topology
from .session import Protocol, RoutingSession

LOGGER = logging.getLogger(__name__)

PROTOCOLS = {
    "dv": Protocol.DISTANCE_VECTOR,
    "ospf": Protocol.LINK_STATE,
    "eigrp": Protocol.EIGRP,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route-lib",
        description="Compute distance-vector, link-state or EIGRP-style routing tables.",
    )
    parser.add_argument("protocol", choices=sorted(PROTOCOLS), help="Routing protocol family")
    parser.add_argument("--topology", "-t", required=True,
                        help="CSV file with source,target[,cost] columns")
    parser.add_argument("--local", "-l", metavar="ROUTER",
                        help="Observing router (required for ospf and eigrp)")
    parser.add_argument("--max-hop", type=int, default=DEFAULT_CONFIG.max_hop,
                        help="Distance-vector cost ceiling (default: %(default)s)")
    parser.add_argument("--max-rounds", type=int, default=DEFAULT_CONFIG.max_rounds,
                        help="Distance-vector round ceiling (default: %(default)s)")
    parser.add_argument("--max-sweeps", type=int, default=DEFAULT_CONFIG.max_sweeps,
                        help="EIGRP-style sweep ceiling (default: %(default)s)")
    parser.add_argument("--atomic", action="store_true",
                        help="Reject the whole CSV if any row is invalid")
    parser.add_argument("--update-duplicates", action="store_true",
                        help="Treat repeated links as cost updates instead of errors")
    parser.add_argument("--output", "-o", metavar="FILE",
                        help="Write the routing table as CSV instead of printing it")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="-v for info, -vv for debug logging")
    return parser


def _print_table(session: RoutingSession) -> None:
    rows = table_rows(session.table)
    if not rows:
        print("routing table empty")
        return
    for row in rows:
        print(f"{row['router']:>8} -> {row['destination']:<8} cost {row['cost']!s:>4}"
              f"  next-hop {row['next_hop']:<8} {row['state']}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    protocol = PROTOCOLS[args.protocol]
    try:
        config = dataclasses.replace(
            DEFAULT_CONFIG,
            max_hop=args.max_hop,
            max_rounds=args.max_rounds,
            max_sweeps=args.max_sweeps,
            import_policy=ImportPolicy.ATOMIC if args.atomic else ImportPolicy.PARTIAL,
            duplicate_policy=DuplicatePolicy.UPDATE if args.update_duplicates else DuplicatePolicy.REJECT,
        )
    except ValueError as e:
        LOGGER.error("%s", e)
        return 2

    try:
        topology, report = load_topology(
            args.topology,
            unit_cost=protocol is Protocol.DISTANCE_VECTOR,
            policy=config.import_policy,
            duplicate_policy=config.duplicate_policy,
        )
    except ImportRejectedError as e:
        for error in e.errors:
            LOGGER.error("%s", error)
        LOGGER.error("%s", e)
        return 2
    except OSError as e:
        LOGGER.error("cannot read topology: %s", e)
        return 2

    LOGGER.info("loaded %d router(s), %d link(s), %d bad row(s)",
                len(topology), topology.get_links_count(), len(report.errors))

    session = RoutingSession(protocol, topology=topology, local_router=args.local, config=config)
    try:
        session.compute()
    except UnknownRouterError as e:
        LOGGER.error("%s", e)
        return 1
    except NonConvergenceError as e:
        LOGGER.error("%s (stopped after %d iterations)", e, e.iterations)
        return 1

    if protocol is Protocol.DISTANCE_VECTOR:
        LOGGER.info("converged after %d changing round(s)", len(session.history))

    if args.output:
        count = write_csv(session.table, args.output)
        LOGGER.info("wrote %d row(s) to %s (unreachable marked %s)", count, args.output, INFINITY_MARKER)
    else:
        _print_table(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
