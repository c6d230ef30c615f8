"""
RIP-like distance-vector engine.

One call to compute_round() is one fully synchronous protocol round: every
router advertises its start-of-round table to each neighbour, applying split
horizon with poisoned reverse, and every neighbour folds the advertisement
into its own table. Callers loop for convergence, or use converge().
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Set

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import NonConvergenceError
from .graph import RouterID, Topology
from .table import (
    INFINITY, UNREACHABLE, Cost, RoundDiff, RouteEntry, RoutingTable, Rows,
    backfill_rows, initial_table,
)

LOGGER = logging.getLogger(__name__)


class Advert(NamedTuple):
    cost: Cost
    poisoned: bool  # True when split horizon replaced a real cost with infinity


class RoundResult(NamedTuple):
    table: RoutingTable
    diff: RoundDiff
    changed: bool


class ConvergenceResult(NamedTuple):
    table: RoutingTable
    rounds: int               # rounds that changed something
    history: List[RoundDiff]  # one diff per changing round


def advertisement(table: RoutingTable, router: RouterID, neighbor: RouterID) -> Dict[RouterID, Advert]:
    """
    The vector router sends to neighbor.

    Every destination whose best route goes through neighbor is advertised
    back to it as unreachable (poisoned reverse).

    Raises:
        UnknownRouterError: If the table has no row for router.
    """
    adverts: Dict[RouterID, Advert] = {}
    for dest, entry in sorted(table.row(router).items()):
        if entry.next_hop == neighbor:
            adverts[dest] = Advert(INFINITY, True)
        else:
            adverts[dest] = Advert(entry.cost, False)
    return adverts


def _reconcile(topology: Topology, previous: RoutingTable, changes: Dict[RouterID, Set[RouterID]]) -> Rows:
    """
    Start-of-round working rows.

    Rows are back-filled for routers added since the previous round, and
    routes through a router that is no longer adjacent are withdrawn.
    Rows of routers that left the topology are dropped.
    """
    rows = {r: d for r, d in previous.mutable_rows().items() if r in topology}
    backfill_rows(rows, topology.routers())
    for router in topology.routers():
        for dest, entry in rows[router].items():
            if dest == router:
                if entry != RouteEntry.self_route(router):
                    rows[router][dest] = RouteEntry.self_route(router)
                    changes.setdefault(router, set()).add(dest)
                continue
            if entry.next_hop is not None and not topology.has_link(router, entry.next_hop):
                LOGGER.debug("%s: %s lost next hop %s, withdrawing", router, dest, entry.next_hop)
                rows[router][dest] = UNREACHABLE
                changes.setdefault(router, set()).add(dest)
    return rows


def compute_round(topology: Topology, previous_table: Optional[RoutingTable] = None,
                  config: EngineConfig = DEFAULT_CONFIG) -> RoundResult:
    """
    Runs one distance-vector round.

    Args:
        topology: Current topology. Link costs are used as-is (1 in unit-cost mode).
        previous_table: Table from the previous round. None starts from
            initial_table(topology). It is never modified.
        config: max_hop caps candidate costs; anything above it is unreachable.

    Returns:
        RoundResult(table, diff, changed). diff maps each router to the
        destinations whose entry changed cost, next hop or state.
    """
    if previous_table is None:
        previous_table = initial_table(topology)

    changes: Dict[RouterID, Set[RouterID]] = {}
    start = RoutingTable(_reconcile(topology, previous_table, changes))
    updated = start.mutable_rows()

    for router in topology.routers():
        for neighbor in topology.neighbors(router):
            link_cost = topology.link_cost(router, neighbor)
            neighbor_row = updated[neighbor]
            for dest, advert in advertisement(start, router, neighbor).items():
                if dest == neighbor:
                    continue
                candidate = advert.cost + link_cost
                if candidate > config.max_hop:
                    candidate = INFINITY

                current = neighbor_row.get(dest, UNREACHABLE)
                new_entry = current

                if current.next_hop == router:
                    # follow our own next hop up or down; an unreachable advert withdraws
                    new_entry = RouteEntry.via(router, candidate)
                elif candidate < current.cost:
                    # strict improvement, or recovery of an unreachable route
                    new_entry = RouteEntry.via(router, candidate)

                if new_entry != current:
                    neighbor_row[dest] = new_entry
                    changes.setdefault(neighbor, set()).add(dest)

    backfill_rows(updated, topology.routers())
    diff: RoundDiff = {router: frozenset(dests) for router, dests in sorted(changes.items())}
    LOGGER.debug("round changed %d entries across %d routers",
                 sum(len(d) for d in diff.values()), len(diff))
    return RoundResult(RoutingTable(updated), diff, bool(diff))


def converge(topology: Topology, table: Optional[RoutingTable] = None,
             config: EngineConfig = DEFAULT_CONFIG) -> ConvergenceResult:
    """
    Repeats compute_round() until a round changes nothing.

    Raises:
        NonConvergenceError: If config.max_rounds rounds all changed something.
            The exception carries the last computed table.
    """
    if table is None:
        table = initial_table(topology)
    history: List[RoundDiff] = []

    for _ in range(config.max_rounds):
        table, diff, changed = compute_round(topology, table, config)
        if not changed:
            LOGGER.info("distance-vector converged after %d changing round(s)", len(history))
            return ConvergenceResult(table, len(history), history)
        history.append(diff)

    raise NonConvergenceError(
        f"Distance-vector did not converge within {config.max_rounds} rounds.",
        table=table,
        iterations=len(history),
    )

