"""Tests for release version classification."""

import pytest

from network_rollout.models.rollout import VersionDelta
from network_rollout.models.tier import Tier
from network_rollout.sequencer import sequence
from network_rollout.versions import classify, parse_release_version


@pytest.mark.parametrize(
    "deployed,desired,expected",
    [
        ("4.11.0", "4.11.0", VersionDelta.SAME),
        ("4.10.0", "4.11.0", VersionDelta.UPGRADE),
        ("4.10.9", "4.10.10", VersionDelta.UPGRADE),
        ("4.12.0", "4.11.0", VersionDelta.DOWNGRADE),
        ("4.11.0-rc.1", "4.11.0", VersionDelta.UPGRADE),
        ("4.11", "4.11.0", VersionDelta.SAME),
        ("4.11.0+build.7", "4.11.0", VersionDelta.SAME),
        (
            "4.10.0-0.nightly-2022-01-01-000000",
            "4.11.0-0.nightly-2022-06-01-000000",
            VersionDelta.UPGRADE,
        ),
        (
            "4.11.0-0.nightly-2022-05-01-000000",
            "4.11.0-0.nightly-2022-06-01-000000",
            VersionDelta.UPGRADE,
        ),
        ("4.11.0-fc.0", "4.11.0", VersionDelta.UPGRADE),
        ("4.11.0-fc.0", "4.11.0-rc.1", VersionDelta.UPGRADE),
        ("4.10.0", "4.11.0-0.ci-2022-06-01-000000", VersionDelta.UPGRADE),
        ("4.11.0", "4.12.0-0.nightly-2022-06-01-000000", VersionDelta.UPGRADE),
        ("4.11.0", "4.11.0-0.nightly-2022-06-01-000000", VersionDelta.DOWNGRADE),
        ("4.12.0-0.ci-2022-06-01-000000", "4.11.0", VersionDelta.DOWNGRADE),
    ],
)
def test_classify_orders_release_versions(deployed, desired, expected):
    assert classify(deployed, desired) is expected


@pytest.mark.parametrize(
    "deployed,desired",
    [
        ("not-a-version", "4.11.0"),
        ("4.10.0", "garbage"),
        ("", "4.11.0"),
    ],
)
def test_classify_unknown_when_unordered(deployed, desired):
    assert classify(deployed, desired) is VersionDelta.UNKNOWN


def test_identical_unparsable_strings_are_same():
    """Equal strings never need an ordering."""
    assert classify("nightly-build", "nightly-build") is VersionDelta.SAME


def test_parse_release_version_rejects_empty():
    assert parse_release_version("") is None
    assert parse_release_version("4.11.0") is not None


def test_nightly_upgrade_moves_node_tier_first(make_tier):
    """Pre-release builds are ordered, so the sequencer does not fail open."""
    node = make_tier(Tier.NODE, version="4.10.0-0.nightly-2022-01-01-000000")
    master = make_tier(Tier.MASTER, version="4.10.0-0.nightly-2022-01-01-000000")

    assert sequence(node, master, "4.11.0-0.nightly-2022-06-01-000000") == (True, False)
