"""Data models for cluster facts, tier state and rollout decisions."""

from network_rollout.models.cluster import (
    ClusterSnapshot,
    ControlPlaneMember,
    FlowsConfig,
    GatewayMode,
    InstallConfig,
    NodeMode,
)
from network_rollout.models.network import NetworkSpec
from network_rollout.models.rollout import RolloutDecision, VersionDelta
from network_rollout.models.tier import IPFamilyMode, ProgressStatus, Tier, TierState

__all__ = [
    "ClusterSnapshot",
    "ControlPlaneMember",
    "FlowsConfig",
    "GatewayMode",
    "InstallConfig",
    "IPFamilyMode",
    "NetworkSpec",
    "NodeMode",
    "ProgressStatus",
    "RolloutDecision",
    "Tier",
    "TierState",
    "VersionDelta",
]
