import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Type

import networkx as nx

from .config import DEFAULT_CONFIG, DuplicatePolicy, ImportPolicy
from .errors import DuplicateLinkError, InvalidLinkError, UnknownRouterError

LOGGER = logging.getLogger(__name__)

RouterID = str


class Link(NamedTuple):
    """An undirected link. Endpoints are stored in sorted order (a < b)."""
    a: RouterID
    b: RouterID
    cost: int


def _check_router_id(router_id: Any, error: Type[Exception] = ValueError) -> None:
    if not isinstance(router_id, str) or not router_id:
        raise error(f"Router IDs must be non-empty strings, got {router_id!r}.")


def _check_cost(cost: Any) -> None:
    # bool is an int subclass but never a meaningful cost
    if isinstance(cost, bool) or not isinstance(cost, int) or cost < 0:
        raise InvalidLinkError(f"Link cost must be a non-negative integer, got {cost!r}.")


class Topology:
    """
    Routers and the symmetric weighted links between them.

    The store holds no routing logic. Routers are created on first use by
    add_link() or explicitly with add_router(); the only way to remove anything
    is reset().

    In unit-cost mode (distance-vector hop counting) every link cost is forced
    to 1, whatever the caller supplies.
    """

    def __init__(self, unit_cost: bool = False,
                 duplicate_policy: DuplicatePolicy = DEFAULT_CONFIG.duplicate_policy) -> None:
        if not isinstance(duplicate_policy, DuplicatePolicy):
            raise TypeError("duplicate_policy must be an instance of DuplicatePolicy Enum")
        self.unit_cost = unit_cost
        self.duplicate_policy = duplicate_policy
        self._adjacency: Dict[RouterID, Dict[RouterID, int]] = {}  # router -> {neighbor: cost}

    def add_router(self, router_id: RouterID) -> None:
        """
        Adds an isolated router. Adding a router that already exists is a no-op.

        Raises:
            ValueError: If router_id is not a non-empty string.
        """
        _check_router_id(router_id)
        self._adjacency.setdefault(router_id, {})

    def add_link(self, a: RouterID, b: RouterID, cost: int = 1) -> Link:
        """
        Adds a bidirectional link between a and b, creating missing routers.

        Args:
            a: One endpoint.
            b: The other endpoint.
            cost: Non-negative integer cost. Ignored (forced to 1) in unit-cost mode.

        Returns:
            The stored link.

        Raises:
            InvalidLinkError: If a == b, or the cost is not a non-negative integer.
            DuplicateLinkError: If the pair is already linked and the duplicate
                policy is REJECT. Under UPDATE the cost is replaced instead.
        """
        _check_router_id(a, InvalidLinkError)
        _check_router_id(b, InvalidLinkError)
        if a == b:
            raise InvalidLinkError(f"Self-link on router {a} is not allowed.")
        if self.unit_cost:
            cost = 1
        _check_cost(cost)

        if self.has_link(a, b):
            if self.duplicate_policy is DuplicatePolicy.UPDATE:
                return self.update_link(a, b, cost)
            raise DuplicateLinkError(a, b)

        self._adjacency.setdefault(a, {})[b] = cost
        self._adjacency.setdefault(b, {})[a] = cost
        LOGGER.debug("added link %s-%s cost %s", a, b, cost)
        return self._make_link(a, b)

    def update_link(self, a: RouterID, b: RouterID, cost: int) -> Link:
        """
        Replaces the cost of an existing link. The old cost is discarded, never summed.

        Raises:
            UnknownRouterError: If either router does not exist.
            InvalidLinkError: If the routers are not linked or the cost is invalid.
        """
        for router_id in (a, b):
            if router_id not in self:
                raise UnknownRouterError(router_id)
        if not self.has_link(a, b):
            raise InvalidLinkError(f"No link between {a} and {b} to update.")
        if self.unit_cost:
            cost = 1
        _check_cost(cost)
        self._adjacency[a][b] = cost
        self._adjacency[b][a] = cost
        LOGGER.debug("updated link %s-%s to cost %s", a, b, cost)
        return self._make_link(a, b)

    def bulk_load(self, rows: Iterable[Mapping[str, Any]],
                  policy: ImportPolicy = DEFAULT_CONFIG.import_policy):
        """Applies tabular rows; see route_lib.importer.bulk_load."""
        from .importer import bulk_load
        return bulk_load(self, rows, policy=policy)

    def reset(self) -> None:
        """Removes every router and link."""
        self._adjacency.clear()

    def copy(self) -> "Topology":
        """Returns an independent snapshot of this topology."""
        clone = Topology(unit_cost=self.unit_cost, duplicate_policy=self.duplicate_policy)
        clone._adjacency = {r: dict(nbrs) for r, nbrs in self._adjacency.items()}
        return clone

    def has_link(self, a: RouterID, b: RouterID) -> bool:
        return b in self._adjacency.get(a, {})

    def link_cost(self, a: RouterID, b: RouterID) -> Optional[int]:
        """
        Gets the cost of the link between a and b.

        Returns:
            The cost if the link exists, otherwise None.
        """
        return self._adjacency.get(a, {}).get(b)

    def neighbors(self, router_id: RouterID) -> List[RouterID]:
        """
        Returns the neighbours of a router in lexicographic order.

        Raises:
            UnknownRouterError: If the router does not exist.
        """
        if router_id not in self._adjacency:
            raise UnknownRouterError(router_id)
        return sorted(self._adjacency[router_id])

    def routers(self) -> List[RouterID]:
        """Returns every router ID in lexicographic order."""
        return sorted(self._adjacency)

    def links(self) -> List[Link]:
        """Returns every link once, sorted by endpoints."""
        return [
            self._make_link(a, b)
            for a in sorted(self._adjacency)
            for b in sorted(self._adjacency[a])
            if a < b
        ]

    def to_networkx(self) -> nx.Graph:
        """Converts the topology to an undirected networkx graph with a 'cost' edge attribute."""
        g = nx.Graph()
        g.add_nodes_from(self.routers())
        for link in self.links():
            g.add_edge(link.a, link.b, cost=link.cost)
        return g

    def _make_link(self, a: RouterID, b: RouterID) -> Link:
        lo, hi = sorted((a, b))
        return Link(lo, hi, self._adjacency[lo][hi])

    def __contains__(self, router_id: object) -> bool:
        return router_id in self._adjacency

    def __iter__(self) -> Iterator[RouterID]:
        return iter(self.routers())

    def __len__(self) -> int:
        """Returns the number of routers in the topology."""
        return len(self._adjacency)

    def get_routers_count(self) -> int:
        return len(self._adjacency)

    def get_links_count(self) -> int:
        """Returns the number of undirected links."""
        return sum(len(nbrs) for nbrs in self._adjacency.values()) // 2

    def __repr__(self) -> str:
        return f"Topology(routers={len(self)}, links={self.get_links_count()}, unit_cost={self.unit_cost})"
