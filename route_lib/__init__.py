from .graph import Topology, Link
from .algorithms import dijkstra, bfs, hop_counts
from .config import EngineConfig, DEFAULT_CONFIG, DuplicatePolicy, ImportPolicy
from .errors import (
    RoutingError, InvalidLinkError, DuplicateLinkError, UnknownRouterError,
    NonConvergenceError, RowValidationError, ImportRejectedError
)
from .table import (
    INFINITY, RouteState, RouteEntry, RoutingTable, RoundDiff,
    initial_table, backfill, diff_tables
)
from . import distance_vector, link_state, eigrp
from .importer import bulk_load, read_csv, load_topology, ImportReport
from .export import table_rows, write_csv
from .session import Protocol, RoutingSession

__all__ = [
    "Topology", "Link", "dijkstra", "bfs", "hop_counts",
    "EngineConfig", "DEFAULT_CONFIG", "DuplicatePolicy", "ImportPolicy",
    "RoutingError", "InvalidLinkError", "DuplicateLinkError", "UnknownRouterError",
    "NonConvergenceError", "RowValidationError", "ImportRejectedError",
    "INFINITY", "RouteState", "RouteEntry", "RoutingTable", "RoundDiff",
    "initial_table", "backfill", "diff_tables",
    "distance_vector", "link_state", "eigrp",
    "bulk_load", "read_csv", "load_topology", "ImportReport",
    "table_rows", "write_csv",
    "Protocol", "RoutingSession"
]
