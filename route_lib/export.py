"""
Tabular routing-table export.

Pure serialisation: one row per (router, destination) with an explicit
marker for unreachable costs and missing next hops.
"""

import csv
from pathlib import Path
from typing import Dict, List, TextIO, Union

from .table import INFINITY, RoutingTable

INFINITY_MARKER = "∞"
NO_HOP_MARKER = "-"
FIELDNAMES = ["router", "destination", "cost", "next_hop", "state"]


def table_rows(table: RoutingTable) -> List[Dict[str, object]]:
    """Rows sorted by router then destination. Finite costs stay ints."""
    rows = []
    for router in table:
        for dest, entry in sorted(table[router].items()):
            rows.append({
                "router": router,
                "destination": dest,
                "cost": INFINITY_MARKER if entry.cost == INFINITY else entry.cost,
                "next_hop": NO_HOP_MARKER if entry.next_hop is None else entry.next_hop,
                "state": entry.state.value,
            })
    return rows


def write_csv(table: RoutingTable, target: Union[str, Path, TextIO]) -> int:
    """
    Writes table_rows() as CSV with a header line.

    Returns:
        The number of data rows written.
    """
    if isinstance(target, (str, Path)):
        with open(target, "w", newline="", encoding="utf-8") as stream:
            return write_csv(table, stream)
    rows = table_rows(table)
    writer = csv.DictWriter(target, fieldnames=FIELDNAMES)
    writer.writeheader()
    writer.writerows(rows)
    return len(rows)
