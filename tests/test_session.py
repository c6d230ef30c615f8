import pytest
from route_lib.config import EngineConfig, ImportPolicy
from route_lib.errors import DuplicateLinkError, NonConvergenceError, UnknownRouterError
from route_lib.session import Protocol, RoutingSession
from route_lib.table import INFINITY, RouteEntry, RouteState


class TestDistanceVectorSession:
    def test_defaults_to_unit_cost_topology(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B", 9)
        assert session.topology.link_cost("A", "B") == 1
        assert session.table.cost("A", "B") == 1

    def test_step_by_step(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B")
        session.add_link("B", "C")
        session.add_link("C", "D")

        first = session.step()
        assert first.changed
        assert session.round_count == 1
        assert session.table.cost("A", "C") == 2
        assert not session.converged

        session.step()
        third = session.step()
        assert not third.changed
        assert session.converged
        assert session.round_count == 3
        assert len(session.history) == 2
        assert session.table.cost("A", "D") == 3

    def test_topology_edit_resets_rounds(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B")
        session.add_link("B", "C")
        session.converge()
        assert session.history

        session.add_link("C", "D")
        assert session.history == []
        assert session.round_count == 0
        assert session.table.cost("A", "C") == INFINITY  # reseeded

    def test_compute_converges(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B")
        session.add_link("B", "C")
        table = session.compute()
        assert table.entry("C", "A") == RouteEntry(2, "B", RouteState.VALID)
        assert session.converged

    def test_non_convergence_keeps_current_table(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR, config=EngineConfig(max_rounds=1))
        for a, b in [("A", "B"), ("B", "C"), ("C", "D")]:
            session.add_link(a, b)
        before = session.table
        with pytest.raises(NonConvergenceError):
            session.converge()
        assert session.table == before
        assert not session.converged

    def test_duplicate_link_leaves_session_untouched(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B")
        session.add_link("B", "C")
        session.step()
        with pytest.raises(DuplicateLinkError):
            session.add_link("B", "A")
        assert session.round_count == 1

    def test_load_rows(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR, config=EngineConfig(import_policy=ImportPolicy.PARTIAL))
        report = session.load_rows([
            {"source": "A", "target": "B"},
            {"source": "B", "target": "B"},
        ])
        assert len(report.errors) == 1
        assert session.table.cost("A", "B") == 1

    def test_reset(self):
        session = RoutingSession(Protocol.DISTANCE_VECTOR)
        session.add_link("A", "B")
        session.reset()
        assert len(session.topology) == 0
        assert len(session.table) == 0


class TestSinglePassSessions:
    def test_link_state(self):
        session = RoutingSession(Protocol.LINK_STATE, local_router="A")
        session.add_link("A", "B", 5)
        session.add_link("B", "C", 2)
        table = session.compute()
        assert table.entry("A", "C") == RouteEntry(7, "B", RouteState.VALID)

    def test_eigrp(self):
        session = RoutingSession(Protocol.EIGRP, local_router="C")
        session.add_link("A", "B", 5)
        session.add_link("B", "C", 2)
        session.add_router("D")
        table = session.compute()
        assert table.entry("C", "A") == RouteEntry(7, "B", RouteState.VALID)
        assert table.entry("C", "D") == RouteEntry.unreachable()

    def test_update_link(self):
        session = RoutingSession(Protocol.LINK_STATE, local_router="A")
        session.add_link("A", "B", 5)
        session.update_link("A", "B", 2)
        assert session.compute().cost("A", "B") == 2

    def test_missing_local_router(self):
        session = RoutingSession(Protocol.LINK_STATE)
        session.add_link("A", "B", 1)
        with pytest.raises(UnknownRouterError):
            session.compute()

    def test_step_requires_distance_vector(self):
        session = RoutingSession(Protocol.EIGRP, local_router="A")
        with pytest.raises(ValueError, match="only defined for distance-vector"):
            session.step()

    def test_protocol_must_be_enum(self):
        with pytest.raises(TypeError):
            RoutingSession("ospf")
