"""Property-based tests for database cluster initiator election.

The initiator is elected once and then kept for as long as it stays a member
of the control plane, so the replicated database is always bootstrapped from
the same node.
"""

import ipaddress

from hypothesis import assume, given
from hypothesis import strategies as st

from network_rollout.bootstrap import ClusterBootstrap
from network_rollout.models.cluster import ControlPlaneMember, InstallConfig
from network_rollout.names import CLUSTER_INITIATOR_ANNOTATION
from network_rollout.simulate import SimulatedClock
from network_rollout.state import MemoryStateStore

addresses = st.ip_addresses(v=4).map(str) | st.ip_addresses(v=6).map(str)
member_sets = st.lists(addresses, min_size=1, max_size=7, unique=True)


class StaticDirectory:
    def __init__(self, addresses):
        self.members = [
            ControlPlaneMember(name=f"master-{i}", internal_address=a)
            for i, a in enumerate(addresses)
        ]

    def list_control_plane_nodes(self):
        return list(self.members)


def make_bootstrap(members, state):
    clock = SimulatedClock()
    return ClusterBootstrap(StaticDirectory(members), state, sleep=clock.sleep, clock=clock)


@given(members=member_sets)
def test_fresh_election_picks_lexicographic_minimum(members):
    state = MemoryStateStore()

    initiator = make_bootstrap(members, state).elect_initiator(members)

    assert initiator == min(members)
    assert state.get(CLUSTER_INITIATOR_ANNOTATION) == initiator


@given(members=member_sets, passes=st.integers(min_value=2, max_value=5))
def test_election_is_idempotent(members, passes):
    """Repeated passes over the same control plane elect once and write once."""
    state = MemoryStateStore()
    bootstrap = make_bootstrap(members, state)

    elected = {bootstrap.elect_initiator(members) for _ in range(passes)}

    assert len(elected) == 1
    assert len(state.writes) == 1


@given(members=member_sets, data=st.data())
def test_initiator_kept_while_member(members, data):
    current = data.draw(st.sampled_from(members))
    state = MemoryStateStore({CLUSTER_INITIATOR_ANNOTATION: current})

    assert make_bootstrap(members, state).elect_initiator(members) == current
    assert state.writes == []


@given(members=member_sets, departed=addresses)
def test_departed_initiator_is_replaced(members, departed):
    members = [m for m in members if m != departed]
    assume(members)
    state = MemoryStateStore({CLUSTER_INITIATOR_ANNOTATION: departed})

    initiator = make_bootstrap(members, state).elect_initiator(members)

    assert initiator == min(members)
    assert state.writes == [(CLUSTER_INITIATOR_ANNOTATION, initiator)]


@given(members=member_sets)
def test_snapshot_lists_every_member_once(members):
    state = MemoryStateStore()

    snapshot = make_bootstrap(members, state).bootstrap(
        InstallConfig(control_plane_replicas=len(members))
    )

    assert list(snapshot.members) == sorted(members)
    assert snapshot.initiator_address in snapshot.members
    assert snapshot.timed_out is False
    assert snapshot.min_available == len(members) // 2 + 1
    for entry in snapshot.db_list(9641).split(","):
        host = entry.removeprefix("ssl:").rsplit(":", 1)[0].strip("[]")
        assert str(ipaddress.ip_address(host)) in members
