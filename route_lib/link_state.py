"""
Link-state (OSPF-like) engine.

Every router is assumed to hold the whole topology, so the table is computed
in one pass: Dijkstra from the observing router, then the first hop toward
each destination is found by walking the predecessor chain back to it.
"""

import logging
from typing import List, Optional, Tuple

from .algorithms import bfs, dijkstra, first_hop
from .errors import UnknownRouterError
from .graph import RouterID, Topology
from .table import UNREACHABLE, RouteEntry, RoutingTable, Rows

LOGGER = logging.getLogger(__name__)


def flood_waves(topology: Topology, local_router: RouterID) -> List[List[RouterID]]:
    """
    Routers reached by an LSA flood from local_router, one list per hop.

    Only meant for observing or animating the flood; it never influences
    compute_table().

    Raises:
        UnknownRouterError: If local_router is not in the topology.
    """
    return bfs(topology, local_router)


def flooding_order(topology: Topology, local_router: RouterID) -> List[RouterID]:
    """The flood waves flattened into visiting order."""
    return [router for wave in flood_waves(topology, local_router) for router in wave]


def _spf_row(topology: Topology, local_router: RouterID) -> dict:
    distances, predecessors = dijkstra(topology, local_router)
    row = {}
    for dest in topology.routers():
        if dest == local_router:
            row[dest] = RouteEntry.self_route(local_router)
        elif dest in distances:
            row[dest] = RouteEntry.via(first_hop(predecessors, local_router, dest), distances[dest])
        else:
            row[dest] = UNREACHABLE
    return row


def compute_table(topology: Topology, local_router: RouterID) -> RoutingTable:
    """
    Shortest-path routing table of one router.

    Args:
        topology: Topology with non-negative integer link costs.
        local_router: The observing router.

    Returns:
        A RoutingTable with a single row for local_router, covering every
        router of the topology. Unreachable destinations have infinite cost
        and no next hop.

    Raises:
        UnknownRouterError: If local_router is not in the topology.
    """
    if local_router not in topology:
        raise UnknownRouterError(local_router)
    LOGGER.debug("running SPF from %s over %d routers", local_router, len(topology))
    return RoutingTable({local_router: _spf_row(topology, local_router)})


def compute_all_tables(topology: Topology) -> RoutingTable:
    """One SPF run per router, merged into a full table."""
    rows: Rows = {router: _spf_row(topology, router) for router in topology.routers()}
    return RoutingTable(rows)


def shortest_path(topology: Topology, source: RouterID, target: RouterID) -> Tuple[Optional[int], List[RouterID]]:
    """
    The path Dijkstra selects between two routers.

    Returns:
        (cost, path) or (None, []) when target is unreachable.

    Raises:
        UnknownRouterError: If either router is not in the topology.
    """
    return dijkstra(topology, source, target)
