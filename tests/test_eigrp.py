import pytest
from route_lib import eigrp, link_state
from route_lib.config import EngineConfig
from route_lib.errors import NonConvergenceError, UnknownRouterError
from route_lib.graph import Topology
from route_lib.table import INFINITY, RouteEntry, RouteState, RoutingTable


def line(n, cost=1):
    t = Topology()
    names = [chr(ord("A") + i) for i in range(n)]
    for a, b in zip(names, names[1:]):
        t.add_link(a, b, cost)
    return t


class TestDistanceMatrix:
    def test_seed_only_needs_no_sweeps(self):
        t = Topology()
        t.add_link("A", "B", 1)
        t.add_link("B", "C", 1)
        t.add_link("A", "C", 1)
        result = eigrp.compute_distance_matrix(t)
        assert result.sweeps == 0
        assert result.distances["A"] == {"A": 0, "B": 1, "C": 1}

    def test_line_distances(self):
        result = eigrp.compute_distance_matrix(line(5, cost=2))
        assert result.distances["A"]["E"] == 8
        assert result.distances["E"]["A"] == 8
        assert result.sweeps >= 1

    def test_non_convergence_reports_partial_table(self):
        with pytest.raises(NonConvergenceError, match="within 1 sweeps") as excinfo:
            eigrp.compute_distance_matrix(line(4), EngineConfig(max_sweeps=1))
        partial = excinfo.value.table
        assert isinstance(partial, RoutingTable)
        assert excinfo.value.iterations == 1
        assert partial.cost("A", "C") == 2
        assert partial.cost("A", "D") == INFINITY


class TestComputeTable:
    def test_triangle_unit_costs(self):
        t = Topology()
        t.add_link("A", "B", 1)
        t.add_link("B", "C", 1)
        t.add_link("A", "C", 1)
        table = eigrp.compute_table(t, "A")
        assert table.entry("A", "B") == RouteEntry(1, "B", RouteState.VALID)
        assert table.entry("A", "C") == RouteEntry(1, "C", RouteState.VALID)

    def test_path_with_two_costs(self):
        t = Topology()
        t.add_link("A", "B", 5)
        t.add_link("B", "C", 2)
        table = eigrp.compute_table(t, "A")
        assert table.entry("A", "C") == RouteEntry(7, "B", RouteState.VALID)

    def test_disconnected_router(self):
        t = line(3)
        t.add_router("D")
        table = eigrp.compute_table(t, "A")
        assert table.entry("A", "D") == RouteEntry.unreachable()

    def test_unknown_local_router(self):
        with pytest.raises(UnknownRouterError):
            eigrp.compute_table(line(2), "Z")

    def test_first_neighbor_on_a_shortest_path(self):
        t = Topology()
        t.add_link("A", "C", 1)
        t.add_link("A", "B", 1)
        t.add_link("C", "D", 1)
        t.add_link("B", "D", 1)
        assert eigrp.compute_table(t, "A").next_hop("A", "D") == "B"

    def test_next_hop_uses_neighbor_distance(self):
        # the direct A-B link costs 10, but B is 2 away through C
        t = Topology()
        t.add_link("A", "B", 10)
        t.add_link("A", "C", 1)
        t.add_link("C", "B", 1)
        t.add_link("B", "D", 1)
        table = eigrp.compute_table(t, "A")
        assert table.entry("A", "B") == RouteEntry(2, "B", RouteState.VALID)
        assert table.entry("A", "D") == RouteEntry(3, "B", RouteState.VALID)
        assert table.entry("A", "C") == RouteEntry(1, "C", RouteState.VALID)

    def test_costs_match_link_state(self):
        t = Topology()
        for a, b, cost in [
            ("A", "B", 4), ("A", "C", 1), ("C", "B", 2), ("B", "D", 5),
            ("C", "D", 8), ("D", "E", 3), ("E", "F", 1), ("C", "F", 20),
        ]:
            t.add_link(a, b, cost)
        t.add_router("Z")
        diffusing = eigrp.compute_all_tables(t)
        spf = link_state.compute_all_tables(t)
        for router in t.routers():
            for dest in t.routers():
                assert diffusing.cost(router, dest) == spf.cost(router, dest)

    def test_idempotent(self):
        t = line(6, cost=3)
        assert eigrp.compute_table(t, "C") == eigrp.compute_table(t, "C")
