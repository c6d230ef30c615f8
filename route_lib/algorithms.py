import heapq
from collections import deque
from typing import Dict, List, Optional, Set, Tuple, Union

from .errors import UnknownRouterError
from .graph import RouterID, Topology


def dijkstra(
    topology: Topology,
    start_router: RouterID,
    end_router: Optional[RouterID] = None
) -> Union[Tuple[Dict[RouterID, int], Dict[RouterID, Optional[RouterID]]],
           Tuple[Optional[int], List[RouterID]]]:
    """
    Single-source shortest paths over non-negative integer link costs.

    Ties are deterministic: the heap is ordered by (cost, router ID), neighbours
    are relaxed in lexicographic order, and an equal-cost alternative never
    replaces the predecessor that was found first.

    Args:
        topology: The topology to search.
        start_router: The source router.
        end_router: Optional. If provided, only the path to this router is returned.

    Returns:
        If end_router is None:
            (distances, predecessors) where distances maps every reachable router
            to its cost and predecessors maps every router to its parent on the
            shortest-path tree (None for the source and for unreachable routers).
        If end_router is specified:
            (cost, path) with path listing routers from start to end, or
            (None, []) when end_router is unreachable.

    Raises:
        UnknownRouterError: If start_router or end_router is not in the topology.
    """
    if start_router not in topology:
        raise UnknownRouterError(start_router)
    if end_router is not None and end_router not in topology:
        raise UnknownRouterError(end_router)

    distances: Dict[RouterID, float] = {r: float('inf') for r in topology.routers()}
    predecessors: Dict[RouterID, Optional[RouterID]] = {r: None for r in topology.routers()}
    distances[start_router] = 0
    settled: Set[RouterID] = set()

    priority_queue: List[Tuple[float, RouterID]] = [(0, start_router)]

    while priority_queue:
        current_distance, current = heapq.heappop(priority_queue)
        if current in settled:
            continue
        settled.add(current)

        if end_router is not None and current == end_router:
            break

        for neighbor in topology.neighbors(current):
            if neighbor in settled:
                continue
            distance = current_distance + topology.link_cost(current, neighbor)
            if distance < distances[neighbor]:
                distances[neighbor] = distance
                predecessors[neighbor] = current
                heapq.heappush(priority_queue, (distance, neighbor))

    if end_router is not None:
        if distances[end_router] == float('inf'):
            return None, []
        path: List[RouterID] = [end_router]
        while path[-1] != start_router:
            path.append(predecessors[path[-1]])
        path.reverse()
        return distances[end_router], path

    reachable = {r: d for r, d in distances.items() if d != float('inf')}
    return reachable, predecessors


def first_hop(
    predecessors: Dict[RouterID, Optional[RouterID]],
    source: RouterID,
    dest: RouterID
) -> Optional[RouterID]:
    """
    Walks the predecessor chain from dest back to the router adjacent to source.

    Returns:
        The first hop on the path, source itself when dest == source, or None
        when dest is not connected to source through the chain.
    """
    if dest == source:
        return source
    step = dest
    while True:
        parent = predecessors.get(step)
        if parent is None:
            return None
        if parent == source:
            return step
        step = parent


def bfs(topology: Topology, start_router: RouterID) -> List[List[RouterID]]:
    """
    Breadth-first traversal grouped into waves of equal hop count.

    Wave 0 is [start_router]; wave k holds the routers first reached after k
    hops, each wave in lexicographic order. Link costs are ignored.

    Raises:
        UnknownRouterError: If start_router is not in the topology.
    """
    if start_router not in topology:
        raise UnknownRouterError(start_router)

    visited: Set[RouterID] = {start_router}
    waves: List[List[RouterID]] = [[start_router]]
    queue = deque([start_router])

    while queue:
        next_wave: List[RouterID] = []
        for _ in range(len(queue)):
            current = queue.popleft()
            for neighbor in topology.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    next_wave.append(neighbor)
        if next_wave:
            next_wave.sort()
            waves.append(next_wave)
            queue.extend(next_wave)

    return waves


def hop_counts(topology: Topology, start_router: RouterID) -> Dict[RouterID, int]:
    """Minimum number of links from start_router to every reachable router."""
    return {
        router: hops
        for hops, wave in enumerate(bfs(topology, start_router))
        for router in wave
    }
