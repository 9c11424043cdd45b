"""Tests for image prepull staging."""

from network_rollout.models.tier import Tier
from network_rollout.prepull import stage

RELEASE = "4.11.0"


def test_fresh_cluster_needs_no_prepull(make_tier):
    assert stage(None, None, RELEASE) == (True, False)


def test_node_already_at_release_is_reconciled(make_tier):
    node = make_tier(Tier.NODE, version=RELEASE)

    assert stage(node, None, RELEASE) == (True, False)


def test_missing_prepull_is_rendered_first(make_tier):
    node = make_tier(Tier.NODE, version="4.10.0")

    assert stage(node, None, RELEASE) == (False, True)


def test_prepull_at_other_version_is_rerendered(make_tier):
    node = make_tier(Tier.NODE, version="4.10.0")
    prepull = make_tier(Tier.PREPULL, version="4.12.0")

    assert stage(node, prepull, RELEASE) == (False, True)


def test_progressing_prepull_holds_node(make_tier):
    node = make_tier(Tier.NODE, version="4.10.0")
    prepull = make_tier(Tier.PREPULL, version=RELEASE, complete=False)

    assert stage(node, prepull, RELEASE) == (False, True)


def test_complete_prepull_releases_node(make_tier):
    node = make_tier(Tier.NODE, version="4.10.0")
    prepull = make_tier(Tier.PREPULL, version=RELEASE)

    assert stage(node, prepull, RELEASE) == (True, False)


def test_hung_prepull_near_completion_releases_node(make_tier):
    node = make_tier(Tier.NODE, version="4.10.0")
    prepull = make_tier(
        Tier.PREPULL,
        version=RELEASE,
        desired_count=20,
        updated_count=18,
        available_count=18,
        hung=True,
    )

    assert stage(node, prepull, RELEASE) == (True, False)
