"""Pytest configuration and shared fixtures."""

import pytest
from hypothesis import Verbosity, settings

from network_rollout import names
from network_rollout.models.tier import IPFamilyMode, ProgressStatus, Tier, TierState

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")

TIER_NAMES = {
    Tier.MASTER: names.MASTER_DAEMONSET,
    Tier.NODE: names.NODE_DAEMONSET,
    Tier.PREPULL: names.PREPULL_DAEMONSET,
}


def build_tier(
    tier: Tier,
    version: str = "4.10.0",
    family_mode: IPFamilyMode | None = None,
    complete: bool = True,
    **progress,
) -> TierState:
    """Build a tier snapshot; ``complete`` selects fully rolled-out counters by default."""
    counters = {
        "desired_count": 3,
        "updated_count": 3 if complete else 1,
        "available_count": 3 if complete else 1,
        "unavailable_count": 0 if complete else 2,
        "spec_generation": 2,
        "observed_generation": 2,
    }
    counters.update(progress)
    name = TIER_NAMES[tier]
    return TierState(
        tier=tier,
        name=name,
        version=version,
        family_mode=family_mode,
        progress=ProgressStatus(**counters),
        manifest={
            "apiVersion": "apps/v1",
            "kind": "DaemonSet",
            "metadata": {
                "name": name,
                "namespace": names.APPLIED_NAMESPACE,
                "annotations": {names.RELEASE_VERSION_ANNOTATION: version},
            },
        },
    )


@pytest.fixture
def make_tier():
    """Factory for tier snapshots."""
    return build_tier


@pytest.fixture
def rendered_objects():
    """A freshly rendered apply set at release 4.11.0."""

    def daemonset(name: str) -> dict:
        return {
            "apiVersion": "apps/v1",
            "kind": "DaemonSet",
            "metadata": {
                "name": name,
                "namespace": names.APPLIED_NAMESPACE,
                "annotations": {names.RELEASE_VERSION_ANNOTATION: "4.11.0"},
            },
            "spec": {"template": {"metadata": {"labels": {"app": name}}}},
        }

    return [
        {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": names.APPLIED_NAMESPACE}},
        daemonset(names.MASTER_DAEMONSET),
        daemonset(names.NODE_DAEMONSET),
        daemonset(names.PREPULL_DAEMONSET),
    ]
