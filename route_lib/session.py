"""
Stateful wrapper for interactive use: one topology, one protocol, and the
"current" routing table. Engines stay pure; this class only decides which
snapshot is current and remembers which entries changed in each round.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from . import distance_vector, eigrp, link_state
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import UnknownRouterError
from .graph import Link, RouterID, Topology
from .importer import ImportReport, bulk_load
from .table import RoundDiff, RoutingTable, initial_table

LOGGER = logging.getLogger(__name__)


class Protocol(Enum):
    DISTANCE_VECTOR = "distance_vector"
    LINK_STATE = "link_state"
    EIGRP = "eigrp"


@dataclass
class RoutingSession:
    protocol: Protocol
    # Defaults to a unit-cost topology for distance-vector, weighted otherwise
    topology: Optional[Topology] = None
    local_router: Optional[RouterID] = None
    config: EngineConfig = DEFAULT_CONFIG
    table: RoutingTable = field(init=False)
    # Changed entries, one RoundDiff per distance-vector round that changed something
    history: List[RoundDiff] = field(default_factory=list, init=False)
    round_count: int = field(default=0, init=False)
    converged: bool = field(default=False, init=False)

    def __post_init__(self):
        if not isinstance(self.protocol, Protocol):
            raise TypeError("protocol must be an instance of Protocol Enum")
        if self.topology is None:
            self.topology = Topology(
                unit_cost=self.protocol is Protocol.DISTANCE_VECTOR,
                duplicate_policy=self.config.duplicate_policy,
            )
        self.reinitialize()

    # --- topology edits: every edit reseeds the table -------------------------

    def add_link(self, a: RouterID, b: RouterID, cost: int = 1) -> Link:
        link = self.topology.add_link(a, b, cost)
        self.reinitialize()
        return link

    def update_link(self, a: RouterID, b: RouterID, cost: int) -> Link:
        link = self.topology.update_link(a, b, cost)
        self.reinitialize()
        return link

    def add_router(self, router_id: RouterID) -> None:
        self.topology.add_router(router_id)
        self.reinitialize()

    def load_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportReport:
        """Bulk import under the session's import policy."""
        report = bulk_load(self.topology, rows, policy=self.config.import_policy)
        self.reinitialize()
        return report

    def reset(self) -> None:
        self.topology.reset()
        self.reinitialize()

    def reinitialize(self) -> None:
        """Reseeds the table from the topology and forgets the round history."""
        self.table = initial_table(self.topology)
        self.history = []
        self.round_count = 0
        self.converged = False

    # --- computation ---------------------------------------------------------

    def step(self) -> distance_vector.RoundResult:
        """
        Runs exactly one distance-vector round and makes its table current.

        Raises:
            ValueError: If the session protocol is not distance-vector.
        """
        if self.protocol is not Protocol.DISTANCE_VECTOR:
            raise ValueError(f"Round stepping is only defined for distance-vector, not {self.protocol.value}.")
        result = distance_vector.compute_round(self.topology, self.table, self.config)
        self.table = result.table
        self.round_count += 1
        if result.changed:
            self.history.append(result.diff)
        self.converged = not result.changed
        LOGGER.debug("round %d: %d router(s) changed", self.round_count, len(result.diff))
        return result

    def converge(self) -> RoutingTable:
        """
        Steps distance-vector rounds until nothing changes.

        Raises:
            NonConvergenceError: After config.max_rounds changing rounds. The session
                table is left untouched; the partial table is on the exception.
        """
        if self.protocol is not Protocol.DISTANCE_VECTOR:
            raise ValueError(f"Round stepping is only defined for distance-vector, not {self.protocol.value}.")
        result = distance_vector.converge(self.topology, self.table, self.config)
        self.round_count += result.rounds + 1
        self.history.extend(result.history)
        self.table = result.table
        self.converged = True
        return self.table

    def compute(self) -> RoutingTable:
        """
        Runs the session's protocol to completion and makes the result current.

        Link-state and EIGRP-style sessions return only the local router's row.

        Raises:
            UnknownRouterError: If a local router is required but missing.
            NonConvergenceError: If the engine hits its iteration ceiling.
        """
        if self.protocol is Protocol.DISTANCE_VECTOR:
            return self.converge()
        if self.local_router is None or self.local_router not in self.topology:
            raise UnknownRouterError(self.local_router)
        if self.protocol is Protocol.LINK_STATE:
            self.table = link_state.compute_table(self.topology, self.local_router)
        else:
            self.table = eigrp.compute_table(self.topology, self.local_router, self.config)
        self.converged = True
        return self.table
