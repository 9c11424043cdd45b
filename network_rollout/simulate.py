"""Offline cluster source for planning a pass from a scenario file."""

import yaml
from pydantic import BaseModel, Field

from network_rollout import names
from network_rollout.exceptions import ConfigurationError
from network_rollout.models.cluster import ControlPlaneMember, InstallConfig
from network_rollout.models.network import NetworkSpec
from network_rollout.models.tier import Tier, TierState

DEFAULT_NETWORK = {
    "clusterNetwork": [{"cidr": "10.128.0.0/14", "hostPrefix": 23}],
    "serviceNetwork": ["172.30.0.0/16"],
}


class Scenario(BaseModel):
    """Cluster state described in a YAML scenario file."""

    release_version: str
    control_plane_replicas: int = 3
    control_plane: list[ControlPlaneMember] = Field(default_factory=list)
    external_control_plane: bool = False
    initiator: str | None = None
    network: dict = Field(default_factory=lambda: dict(DEFAULT_NETWORK))
    previous_network: dict | None = None
    tiers: dict[Tier, dict] = Field(default_factory=dict)
    config_maps: dict[str, dict[str, str]] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: str) -> "Scenario":
        """Load a scenario from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Failed to read scenario file: {path}", str(e)) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Scenario file is not valid YAML: {path}", str(e)) from e
        try:
            return cls(**data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid scenario in {path}", str(e)) from e

    def network_spec(self) -> NetworkSpec:
        return NetworkSpec.from_operator_spec(self.network)

    def previous_network_spec(self) -> NetworkSpec | None:
        if self.previous_network is None:
            return None
        return NetworkSpec.from_operator_spec(self.previous_network)

    def tier_state(self, tier: Tier) -> TierState | None:
        raw = self.tiers.get(tier)
        if raw is None:
            return None
        name = {
            Tier.MASTER: names.MASTER_DAEMONSET,
            Tier.NODE: names.NODE_DAEMONSET,
            Tier.PREPULL: names.PREPULL_DAEMONSET,
        }[tier]
        state = {"name": name, **raw, "tier": tier}
        state.setdefault(
            "manifest",
            {
                "apiVersion": "apps/v1",
                "kind": "DaemonSet",
                "metadata": {"name": name, "namespace": names.APPLIED_NAMESPACE},
            },
        )
        return TierState(**state)


class SimulatedClock:
    """Clock whose time only moves when something sleeps."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class ScenarioCluster:
    """Serves a scenario through the cluster source and node directory interfaces."""

    def __init__(self, scenario: Scenario):
        self.scenario = scenario

    def read_install_config(self) -> InstallConfig:
        return InstallConfig(control_plane_replicas=self.scenario.control_plane_replicas)

    def is_external_control_plane(self) -> bool:
        return self.scenario.external_control_plane

    def read_tier(self, tier: Tier) -> TierState | None:
        return self.scenario.tier_state(tier)

    def read_config_map(self, name: str) -> dict[str, str] | None:
        return self.scenario.config_maps.get(name)

    def list_control_plane_nodes(self) -> list[ControlPlaneMember]:
        return list(self.scenario.control_plane)
