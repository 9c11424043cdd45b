"""Property-based tests for the version-skew ordering table.

Node and master tiers are sequenced so that, on upgrade, the node tier always
moves first and the master tier only follows once nodes have rolled out; on
downgrade the order reverses.
"""

import itertools

import pytest
from hypothesis import given
from hypothesis import strategies as st

from network_rollout.models.rollout import VersionDelta
from network_rollout.models.tier import Tier
from network_rollout.sequencer import order, sequence
from network_rollout.versions import classify
from tests.conftest import build_tier

U, S, D, X = VersionDelta.UPGRADE, VersionDelta.SAME, VersionDelta.DOWNGRADE, VersionDelta.UNKNOWN

# (node, master) -> (update_node, update_master) with both tiers fully rolled out
ROLLED_OUT_TABLE = {
    (U, U): (True, False),
    (U, S): (True, True),
    (U, D): (True, True),
    (S, U): (True, True),
    (S, S): (True, True),
    (S, D): (True, True),
    (D, U): (True, True),
    (D, S): (True, True),
    (D, D): (False, True),
}


@pytest.mark.parametrize(
    "node_delta,master_delta", list(itertools.product([U, S, D, X], repeat=2))
)
def test_every_cell_with_rolled_out_tiers(node_delta, master_delta):
    node = build_tier(Tier.NODE)
    master = build_tier(Tier.MASTER)

    expected = ROLLED_OUT_TABLE.get((node_delta, master_delta), (True, True))

    assert order(node_delta, master_delta, node, master) == expected


def test_master_waits_for_progressing_node():
    node = build_tier(Tier.NODE, complete=False)
    master = build_tier(Tier.MASTER)

    assert order(S, U, node, master) == (True, False)


def test_node_waits_for_progressing_master():
    node = build_tier(Tier.NODE)
    master = build_tier(Tier.MASTER, complete=False)

    assert order(D, S, node, master) == (False, True)


def test_hung_node_unblocks_master_upgrade():
    node = build_tier(Tier.NODE, desired_count=10, updated_count=9, available_count=9, hung=True)
    master = build_tier(Tier.MASTER)

    assert order(S, U, node, master) == (True, True)


def test_hung_master_still_blocks_node_downgrade():
    node = build_tier(Tier.NODE)
    master = build_tier(
        Tier.MASTER, desired_count=10, updated_count=9, available_count=9, hung=True
    )

    assert order(D, S, node, master) == (False, True)


def test_missing_tier_updates_both():
    assert sequence(None, build_tier(Tier.MASTER), "4.11.0") == (True, True)
    assert sequence(build_tier(Tier.NODE), None, "4.11.0") == (True, True)


def test_both_at_release_updates_both_even_when_progressing():
    node = build_tier(Tier.NODE, version="4.11.0", complete=False)
    master = build_tier(Tier.MASTER, version="4.11.0", complete=False)

    assert sequence(node, master, "4.11.0") == (True, True)


versions = st.tuples(
    st.integers(min_value=4, max_value=5),
    st.integers(min_value=0, max_value=20),
    st.integers(min_value=0, max_value=5),
).map(lambda v: ".".join(str(p) for p in v))


@given(node_version=versions, master_version=versions, release=versions, complete=st.booleans())
def test_never_holds_both_tiers(node_version, master_version, release, complete):
    """At least one tier is always allowed to move."""
    node = build_tier(Tier.NODE, version=node_version, complete=complete)
    master = build_tier(Tier.MASTER, version=master_version, complete=complete)

    assert any(sequence(node, master, release))


@given(old=versions, release=versions, complete=st.booleans())
def test_tiers_move_in_release_order(old, release, complete):
    """With both tiers at the same old version, the leading tier moves alone."""
    node = build_tier(Tier.NODE, version=old, complete=complete)
    master = build_tier(Tier.MASTER, version=old, complete=complete)

    delta = classify(old, release)
    update_node, update_master = sequence(node, master, release)

    if delta is U:
        assert (update_node, update_master) == (True, False)
    elif delta is D:
        assert (update_node, update_master) == (False, True)
    else:
        assert (update_node, update_master) == (True, True)
