"""Tests for rollout progress evaluation."""

import pytest

from network_rollout.models.tier import Tier
from network_rollout.progress import is_progressing


def test_complete_rollout_is_not_progressing(make_tier):
    tier = make_tier(Tier.NODE, desired_count=10, updated_count=10, available_count=10)

    assert is_progressing(tier, allow_hung=False) is False
    assert is_progressing(tier, allow_hung=True) is False


@pytest.mark.parametrize(
    "counters",
    [
        {"desired_count": 10, "updated_count": 9, "available_count": 10},
        {"desired_count": 10, "updated_count": 10, "available_count": 9, "unavailable_count": 1},
        {"desired_count": 10, "updated_count": 10, "available_count": 0},
        {"desired_count": 10, "updated_count": 10, "available_count": 10, "spec_generation": 3},
    ],
)
def test_each_base_condition_means_progressing(make_tier, counters):
    tier = make_tier(Tier.NODE, **counters)

    assert is_progressing(tier, allow_hung=False) is True


def test_hung_with_one_behind_out_of_ten_is_complete(make_tier):
    tier = make_tier(Tier.NODE, desired_count=10, updated_count=9, available_count=9, hung=True)

    assert is_progressing(tier, allow_hung=True) is False


def test_hung_with_two_behind_out_of_ten_is_progressing(make_tier):
    tier = make_tier(Tier.NODE, desired_count=10, updated_count=8, available_count=8, hung=True)

    assert is_progressing(tier, allow_hung=True) is True


def test_hung_marker_ignored_without_allow_hung(make_tier):
    tier = make_tier(Tier.MASTER, desired_count=10, updated_count=9, available_count=9, hung=True)

    assert is_progressing(tier, allow_hung=False) is True


def test_small_cluster_tolerates_one_straggler(make_tier):
    """max(1, floor(3 * 0.1)) == 1."""
    tier = make_tier(Tier.NODE, desired_count=3, updated_count=2, available_count=2, hung=True)

    assert is_progressing(tier, allow_hung=True) is False


def test_not_hung_is_progressing_even_when_close(make_tier):
    tier = make_tier(Tier.NODE, desired_count=10, updated_count=9, available_count=9, hung=False)

    assert is_progressing(tier, allow_hung=True) is True
