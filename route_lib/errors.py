from typing import Any, Hashable, List, Optional


class RoutingError(Exception):
    """Base class for every error raised by route_lib."""


class InvalidLinkError(RoutingError, ValueError):
    """Raised for self-links, bad costs, or updates of links that do not exist."""


class DuplicateLinkError(RoutingError, ValueError):
    """Raised when a link between the same unordered pair is added twice."""

    def __init__(self, a: Hashable, b: Hashable) -> None:
        super().__init__(f"Link between {a} and {b} already exists.")
        self.a = a
        self.b = b


class UnknownRouterError(RoutingError, ValueError):
    """Raised when an operation references a router that is not in the topology."""

    def __init__(self, router_id: Hashable) -> None:
        super().__init__(f"Router {router_id} not found in the topology.")
        self.router_id = router_id


class NonConvergenceError(RoutingError, RuntimeError):
    """
    Raised when a round or sweep ceiling is hit before reaching a fixed point.

    The last computed table is attached so callers can inspect partial
    progress. It is not a stable result.
    """

    def __init__(self, message: str, table: Optional[Any] = None, iterations: int = 0) -> None:
        super().__init__(message)
        self.table = table
        self.iterations = iterations


class RowValidationError(RoutingError, ValueError):
    """A single malformed row in a tabular topology import."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Row {index}: {reason}")
        self.index = index
        self.reason = reason


class ImportRejectedError(RoutingError):
    """Raised by an atomic import when at least one row is invalid."""

    def __init__(self, errors: List[RowValidationError]) -> None:
        super().__init__(f"Import rejected: {len(errors)} invalid row(s).")
        self.errors = errors
