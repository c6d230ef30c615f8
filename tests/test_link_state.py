import networkx as nx
import pytest
from route_lib import link_state
from route_lib.errors import UnknownRouterError
from route_lib.graph import Topology
from route_lib.table import INFINITY, RouteEntry, RouteState


def weighted_topology():
    t = Topology()
    for a, b, cost in [
        ("A", "B", 4), ("A", "C", 1), ("C", "B", 2), ("B", "D", 5),
        ("C", "D", 8), ("D", "E", 3), ("E", "F", 1), ("C", "F", 20),
        ("F", "G", 0),
    ]:
        t.add_link(a, b, cost)
    return t


class TestComputeTable:
    def test_path_with_two_costs(self):
        t = Topology()
        t.add_link("A", "B", 5)
        t.add_link("B", "C", 2)
        table = link_state.compute_table(t, "A")
        assert table.routers() == ["A"]
        assert table.entry("A", "C") == RouteEntry(7, "B", RouteState.VALID)
        assert table.entry("A", "B") == RouteEntry(5, "B", RouteState.VALID)
        assert table.entry("A", "A") == RouteEntry.self_route("A")

    def test_triangle_unit_costs(self):
        t = Topology()
        t.add_link("A", "B", 1)
        t.add_link("B", "C", 1)
        t.add_link("A", "C", 1)
        table = link_state.compute_table(t, "A")
        assert {d: e.cost for d, e in table["A"].items() if d != "A"} == {"B": 1, "C": 1}
        assert table.next_hop("A", "C") == "C"

    def test_disconnected_router(self):
        t = Topology()
        t.add_link("A", "B", 1)
        t.add_router("D")
        table = link_state.compute_table(t, "A")
        assert table.entry("A", "D") == RouteEntry.unreachable()
        assert table.entry("A", "D").cost == INFINITY

    def test_unknown_local_router(self):
        t = Topology()
        t.add_link("A", "B", 1)
        with pytest.raises(UnknownRouterError, match="Router Z not found in the topology."):
            link_state.compute_table(t, "Z")

    def test_equal_cost_next_hop_is_deterministic(self):
        t = Topology()
        t.add_link("A", "C", 1)
        t.add_link("A", "B", 1)
        t.add_link("C", "D", 1)
        t.add_link("B", "D", 1)
        assert link_state.compute_table(t, "A").next_hop("A", "D") == "B"

    def test_next_hop_is_first_hop_not_predecessor(self):
        t = Topology()
        t.add_link("A", "B", 1)
        t.add_link("B", "C", 1)
        t.add_link("C", "D", 1)
        table = link_state.compute_table(t, "A")
        assert table.next_hop("A", "D") == "B"

    def test_zero_cost_link(self):
        t = Topology()
        t.add_link("A", "B", 0)
        table = link_state.compute_table(t, "A")
        assert table.entry("A", "B") == RouteEntry(0, "B", RouteState.VALID)

    def test_matches_networkx_dijkstra(self):
        t = weighted_topology()
        g = t.to_networkx()
        for source in t.routers():
            expected = nx.single_source_dijkstra_path_length(g, source, weight="cost")
            table = link_state.compute_table(t, source)
            for dest in t.routers():
                assert table.cost(source, dest) == expected[dest]

    def test_next_hop_chain_strictly_decreases(self):
        t = weighted_topology()
        t.add_link("H", "I", 2)  # a second component
        full = link_state.compute_all_tables(t)
        for source in t.routers():
            for dest in t.routers():
                if full.cost(source, dest) == INFINITY:
                    assert full.next_hop(source, dest) is None
                    continue
                current, remaining, hops = source, full.cost(source, dest), 0
                while current != dest:
                    nxt = full.next_hop(current, dest)
                    assert t.has_link(current, nxt)
                    step_cost = t.link_cost(current, nxt)
                    assert full.cost(nxt, dest) == remaining - step_cost
                    current, remaining, hops = nxt, remaining - step_cost, hops + 1
                    assert hops <= len(t)
                assert remaining == 0

    def test_idempotent(self):
        t = weighted_topology()
        assert link_state.compute_table(t, "A") == link_state.compute_table(t, "A")

    def test_compute_all_tables_rows_match_single_tables(self):
        t = weighted_topology()
        full = link_state.compute_all_tables(t)
        for router in t.routers():
            assert dict(full[router]) == dict(link_state.compute_table(t, router)[router])


class TestFlooding:
    def test_flood_waves(self):
        t = Topology()
        t.add_link("A", "C", 9)
        t.add_link("A", "B", 1)
        t.add_link("B", "D", 1)
        t.add_router("Z")
        assert link_state.flood_waves(t, "A") == [["A"], ["B", "C"], ["D"]]
        assert link_state.flooding_order(t, "A") == ["A", "B", "C", "D"]

    def test_flooding_does_not_change_table(self):
        t = weighted_topology()
        before = link_state.compute_table(t, "A")
        link_state.flooding_order(t, "A")
        assert link_state.compute_table(t, "A") == before

    def test_flooding_unknown_router(self):
        with pytest.raises(UnknownRouterError):
            link_state.flooding_order(Topology(), "A")


class TestShortestPath:
    def test_shortest_path(self):
        t = weighted_topology()
        assert link_state.shortest_path(t, "A", "D") == (8, ["A", "C", "B", "D"])

    def test_shortest_path_unreachable(self):
        t = weighted_topology()
        t.add_router("Z")
        assert link_state.shortest_path(t, "A", "Z") == (None, [])
