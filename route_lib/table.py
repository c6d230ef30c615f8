from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from .errors import UnknownRouterError
from .graph import RouterID, Topology

INFINITY = float('inf')
Cost = Union[int, float]  # a non-negative int, or INFINITY when unreachable

# router -> destinations whose entry changed during one round
RoundDiff = Dict[RouterID, FrozenSet[RouterID]]


class RouteState(Enum):
    VALID = "valid"
    INVALID = "invalid"  # poisoned or withdrawn


@dataclass(frozen=True)
class RouteEntry:
    cost: Cost = INFINITY
    next_hop: Optional[RouterID] = None
    state: RouteState = RouteState.INVALID

    def __post_init__(self):
        if not isinstance(self.state, RouteState):
            raise TypeError("state must be an instance of RouteState Enum")
        if self.state is RouteState.INVALID and (self.cost != INFINITY or self.next_hop is not None):
            raise ValueError("An invalid route must have infinite cost and no next hop.")
        if self.cost != INFINITY and self.cost < 0:
            raise ValueError(f"Route cost cannot be negative, got {self.cost}.")

    @classmethod
    def unreachable(cls) -> "RouteEntry":
        return cls(INFINITY, None, RouteState.INVALID)

    @classmethod
    def self_route(cls, router_id: RouterID) -> "RouteEntry":
        return cls(0, router_id, RouteState.VALID)

    @classmethod
    def via(cls, next_hop: RouterID, cost: Cost) -> "RouteEntry":
        """A valid route through next_hop, or an unreachable one when cost is infinite."""
        if cost == INFINITY:
            return cls.unreachable()
        return cls(cost, next_hop, RouteState.VALID)

    @property
    def reachable(self) -> bool:
        return self.cost != INFINITY


UNREACHABLE = RouteEntry.unreachable()

Rows = Dict[RouterID, Dict[RouterID, RouteEntry]]


class RoutingTable(Mapping):
    """
    Immutable snapshot: router ID -> destination ID -> RouteEntry.

    Engines build a plain nested dict, then freeze it here. Nothing handed
    out by this class can be used to change the snapshot.
    """

    def __init__(self, rows: Optional[Mapping[RouterID, Mapping[RouterID, RouteEntry]]] = None) -> None:
        self._rows: Rows = {
            router: dict(dests) for router, dests in (rows or {}).items()
        }

    def __getitem__(self, router_id: RouterID) -> Mapping[RouterID, RouteEntry]:
        return MappingProxyType(self._rows[router_id])

    def __iter__(self) -> Iterator[RouterID]:
        return iter(sorted(self._rows))

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RoutingTable):
            return self._rows == other._rows
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(
            (router, tuple(sorted(dests.items())))
            for router, dests in sorted(self._rows.items())
        ))

    def row(self, router_id: RouterID) -> Mapping[RouterID, RouteEntry]:
        """
        Returns the read-only row of one router.

        Raises:
            UnknownRouterError: If the table has no row for router_id.
        """
        if router_id not in self._rows:
            raise UnknownRouterError(router_id)
        return self[router_id]

    def entry(self, router_id: RouterID, dest: RouterID) -> RouteEntry:
        """Entry for (router, dest). Missing destinations read as unreachable."""
        return self.row(router_id).get(dest, UNREACHABLE)

    def cost(self, router_id: RouterID, dest: RouterID) -> Cost:
        return self.entry(router_id, dest).cost

    def next_hop(self, router_id: RouterID, dest: RouterID) -> Optional[RouterID]:
        return self.entry(router_id, dest).next_hop

    def routers(self) -> List[RouterID]:
        return sorted(self._rows)

    def mutable_rows(self) -> Rows:
        """A fresh nested dict copy. Mutating it never touches this snapshot."""
        return {router: dict(dests) for router, dests in self._rows.items()}

    def to_dict(self) -> Dict[RouterID, Dict[RouterID, dict]]:
        """Plain nested dicts, suitable for JSON-like consumers. Infinite costs stay float('inf')."""
        return {
            router: {
                dest: {"cost": e.cost, "next_hop": e.next_hop, "state": e.state.value}
                for dest, e in sorted(dests.items())
            }
            for router, dests in sorted(self._rows.items())
        }

    @classmethod
    def from_dict(cls, data: Mapping[RouterID, Mapping[RouterID, Mapping]]) -> "RoutingTable":
        return cls({
            router: {
                dest: RouteEntry(e["cost"], e["next_hop"], RouteState(e["state"]))
                for dest, e in dests.items()
            }
            for router, dests in data.items()
        })

    def __repr__(self) -> str:
        return f"RoutingTable(routers={self.routers()})"


def backfill_rows(rows: Rows, routers: Iterable[RouterID]) -> Rows:
    """Adds missing rows and missing destinations (unreachable) in place. Returns rows."""
    routers = list(routers)
    for router in routers:
        dests = rows.setdefault(router, {})
        for dest in routers:
            if dest not in dests:
                dests[dest] = RouteEntry.self_route(router) if dest == router else UNREACHABLE
    return rows


def initial_table(topology: Topology) -> RoutingTable:
    """
    Seeds a table for every router of the topology.

    Self entries get cost 0, direct neighbours get the link cost with the
    neighbour as next hop, everything else is unreachable and invalid.
    """
    rows: Rows = {}
    for router in topology.routers():
        rows[router] = {router: RouteEntry.self_route(router)}
        for neighbor in topology.neighbors(router):
            rows[router][neighbor] = RouteEntry.via(neighbor, topology.link_cost(router, neighbor))
    return RoutingTable(backfill_rows(rows, topology.routers()))


def backfill(table: RoutingTable, topology: Topology) -> RoutingTable:
    """Returns a copy of table with placeholders for routers added since it was built."""
    return RoutingTable(backfill_rows(table.mutable_rows(), topology.routers()))


def diff_tables(old: RoutingTable, new: RoutingTable) -> RoundDiff:
    """
    Destinations whose entry differs between two snapshots, per router.

    Rows or destinations present on only one side count as changed.
    """
    diff: RoundDiff = {}
    for router in sorted(set(old.routers()) | set(new.routers())):
        old_row = old[router] if router in old else {}
        new_row = new[router] if router in new else {}
        changed = frozenset(
            dest for dest in set(old_row) | set(new_row)
            if old_row.get(dest) != new_row.get(dest)
        )
        if changed:
            diff[router] = changed
    return diff
