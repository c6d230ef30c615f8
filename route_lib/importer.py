"""
Tabular topology import.

Rows are mappings with 'source', 'target' and an optional 'cost' column, as
produced by csv.DictReader. Every malformed row produces exactly one
RowValidationError; what happens to the valid rows depends on the
ImportPolicy.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Set, TextIO, Tuple, Union

from .config import DEFAULT_CONFIG, DuplicatePolicy, ImportPolicy
from .errors import ImportRejectedError, RowValidationError
from .graph import Link, RouterID, Topology

LOGGER = logging.getLogger(__name__)

DEFAULT_COST = 1


class ImportReport(NamedTuple):
    applied: List[Link]
    errors: List[RowValidationError]


class _ValidRow(NamedTuple):
    index: int
    source: RouterID
    target: RouterID
    cost: int


def _field(row: Mapping[str, Any], name: str) -> Optional[str]:
    value = row.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_cost(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError("cost must be a number")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError("cost must be an integer")
        return int(raw)
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise ValueError("cost must be a number") from None
    if not number.is_integer():
        raise ValueError("cost must be an integer")
    return int(number)


def validate_row(index: int, row: Mapping[str, Any], unit_cost: bool = False) -> _ValidRow:
    """
    Checks one row in isolation (duplicates are checked by bulk_load).

    Raises:
        RowValidationError: On a missing field, self-link, or a non-numeric or
            negative cost. Costs are not read at all in unit-cost mode.
    """
    source = _field(row, "source")
    target = _field(row, "target")
    if source is None:
        raise RowValidationError(index, "missing field 'source'")
    if target is None:
        raise RowValidationError(index, "missing field 'target'")
    if source == target:
        raise RowValidationError(index, f"self-link on router {source}")

    cost = DEFAULT_COST
    raw_cost = row.get("cost")
    if not unit_cost and raw_cost is not None and str(raw_cost).strip() != "":
        try:
            cost = _parse_cost(raw_cost)
        except ValueError as e:
            raise RowValidationError(index, f"invalid cost {raw_cost!r}: {e}") from None
        if cost < 0:
            raise RowValidationError(index, f"negative cost {cost}")
    return _ValidRow(index, source, target, cost)


def bulk_load(topology: Topology, rows: Iterable[Mapping[str, Any]],
              policy: ImportPolicy = DEFAULT_CONFIG.import_policy) -> ImportReport:
    """
    Applies (source, target, cost) rows to a topology.

    Duplicates are judged against the topology and against earlier rows of
    the same batch. They are errors under DuplicatePolicy.REJECT and cost
    updates under DuplicatePolicy.UPDATE.

    Args:
        topology: Topology to grow.
        rows: Row mappings; indexes in errors are 0-based positions in rows.
        policy: PARTIAL commits every valid row; ATOMIC commits nothing if any
            row is invalid.

    Returns:
        ImportReport(applied, errors). errors is always empty under ATOMIC.

    Raises:
        ImportRejectedError: Under ATOMIC, when at least one row is invalid.
    """
    if not isinstance(policy, ImportPolicy):
        raise TypeError("policy must be an instance of ImportPolicy Enum")

    valid: List[_ValidRow] = []
    errors: List[RowValidationError] = []
    seen: Set[Tuple[RouterID, RouterID]] = set()

    for index, row in enumerate(rows):
        try:
            checked = validate_row(index, row, unit_cost=topology.unit_cost)
            pair = tuple(sorted((checked.source, checked.target)))
            duplicate = pair in seen or topology.has_link(checked.source, checked.target)
            if duplicate and topology.duplicate_policy is DuplicatePolicy.REJECT:
                raise RowValidationError(index, f"duplicate link {pair[0]}-{pair[1]}")
        except RowValidationError as e:
            LOGGER.warning("rejected topology row: %s", e)
            errors.append(e)
            continue
        seen.add(pair)
        valid.append(checked)

    if errors and policy is ImportPolicy.ATOMIC:
        raise ImportRejectedError(errors)

    applied = [topology.add_link(r.source, r.target, r.cost) for r in valid]
    LOGGER.info("imported %d link(s), %d row(s) rejected", len(applied), len(errors))
    return ImportReport(applied, errors)


def read_csv(source: Union[str, Path, TextIO]) -> List[dict]:
    """
    Reads a headered CSV into row dicts. Header names are stripped and lowercased.

    Args:
        source: A path, or an already open text stream.
    """
    if isinstance(source, (str, Path)):
        with open(source, newline="", encoding="utf-8") as stream:
            return read_csv(stream)
    reader = csv.DictReader(source, skipinitialspace=True)
    if reader.fieldnames is None:
        return []
    reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    return [dict(row) for row in reader]


def load_topology(source: Union[str, Path, TextIO], unit_cost: bool = False,
                  policy: ImportPolicy = DEFAULT_CONFIG.import_policy,
                  duplicate_policy: DuplicatePolicy = DEFAULT_CONFIG.duplicate_policy) -> Tuple[Topology, ImportReport]:
    """Builds a new topology from a CSV source."""
    topology = Topology(unit_cost=unit_cost, duplicate_policy=duplicate_policy)
    report = bulk_load(topology, read_csv(source), policy=policy)
    return topology, report


def loads_topology(text: str, **kwargs) -> Tuple[Topology, ImportReport]:
    """load_topology() over CSV text."""
    return load_topology(io.StringIO(text), **kwargs)
