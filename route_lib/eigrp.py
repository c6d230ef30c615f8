"""
EIGRP-style engine.

This is NOT the DUAL finite-state machine. It is a simplified stand-in for
a diffusing computation: every router keeps a distance to every destination
and repeatedly relaxes it through the distances its neighbours know, until a
full sweep changes nothing (multi-source Bellman-Ford).
"""

import logging
from typing import Dict, NamedTuple

from .config import DEFAULT_CONFIG, EngineConfig
from .errors import NonConvergenceError, UnknownRouterError
from .graph import RouterID, Topology
from .table import INFINITY, Cost, RouteEntry, RoutingTable, Rows

LOGGER = logging.getLogger(__name__)

Matrix = Dict[RouterID, Dict[RouterID, Cost]]


class DistanceMatrix(NamedTuple):
    distances: Matrix
    sweeps: int  # sweeps that relaxed at least one distance


def _seed(topology: Topology) -> Matrix:
    routers = topology.routers()
    dist: Matrix = {r: {d: (0 if r == d else INFINITY) for d in routers} for r in routers}
    for link in topology.links():
        dist[link.a][link.b] = link.cost
        dist[link.b][link.a] = link.cost
    return dist


def _sweep(topology: Topology, dist: Matrix) -> bool:
    relaxed = False
    routers = topology.routers()
    for router in routers:
        for neighbor in topology.neighbors(router):
            for dest in routers:
                if dest == router:
                    continue
                new_cost = dist[router][neighbor] + dist[neighbor][dest]
                if new_cost < dist[router][dest]:
                    dist[router][dest] = new_cost
                    relaxed = True
    return relaxed


def _row(topology: Topology, dist: Matrix, local_router: RouterID) -> Dict[RouterID, RouteEntry]:
    row = {}
    neighbors = topology.neighbors(local_router)
    for dest in topology.routers():
        if dest == local_router:
            row[dest] = RouteEntry.self_route(local_router)
            continue
        best = dist[local_router][dest]
        next_hop = None
        if best != INFINITY:
            for neighbor in neighbors:
                if dist[local_router][neighbor] + dist[neighbor][dest] == best:
                    next_hop = neighbor
                    break
        row[dest] = RouteEntry.via(next_hop, best)
    return row


def _rows(topology: Topology, dist: Matrix) -> Rows:
    return {router: _row(topology, dist, router) for router in topology.routers()}


def compute_distance_matrix(topology: Topology, config: EngineConfig = DEFAULT_CONFIG) -> DistanceMatrix:
    """
    All-pairs distances by neighbour relaxation sweeps.

    Raises:
        NonConvergenceError: If config.max_sweeps sweeps all relaxed something.
            The partial table of every router is attached.
    """
    dist = _seed(topology)
    for sweep in range(config.max_sweeps):
        if not _sweep(topology, dist):
            LOGGER.debug("relaxation reached a fixed point after %d sweep(s)", sweep)
            return DistanceMatrix(dist, sweep)
    raise NonConvergenceError(
        f"Relaxation did not reach a fixed point within {config.max_sweeps} sweeps.",
        table=RoutingTable(_rows(topology, dist)),
        iterations=config.max_sweeps,
    )


def compute_table(topology: Topology, local_router: RouterID,
                  config: EngineConfig = DEFAULT_CONFIG) -> RoutingTable:
    """
    Routing table of local_router after relaxation converges.

    The next hop for a destination is the first neighbour, in lexicographic
    order, that lies on a shortest path to it.

    Raises:
        UnknownRouterError: If local_router is not in the topology.
        NonConvergenceError: See compute_distance_matrix().
    """
    if local_router not in topology:
        raise UnknownRouterError(local_router)
    dist = compute_distance_matrix(topology, config).distances
    return RoutingTable({local_router: _row(topology, dist, local_router)})


def compute_all_tables(topology: Topology, config: EngineConfig = DEFAULT_CONFIG) -> RoutingTable:
    dist = compute_distance_matrix(topology, config).distances
    return RoutingTable(_rows(topology, dist))
