"""Data models for bootstrapped cluster facts."""

import ipaddress
from enum import Enum

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from network_rollout.models.tier import TierState


class NodeMode(str, Enum):
    """Where the node tier runs its datapath."""

    FULL = "full"
    DPU = "dpu"
    DPU_HOST = "dpu-host"


class GatewayMode(str, Enum):
    """Egress gateway mode of the node tier."""

    SHARED = "shared"
    LOCAL = "local"


class ControlPlaneMember(BaseModel):
    """A node discovered with the control-plane role."""

    model_config = ConfigDict(frozen=True)

    name: str
    internal_address: str | None = None


class InstallConfig(BaseModel):
    """The subset of the install-time configuration the bootstrap needs."""

    control_plane_replicas: int = 0

    @classmethod
    def from_yaml(cls, text: str) -> "InstallConfig":
        """Parse the ``install-config`` document.

        Raises:
            yaml.YAMLError: If the document is not valid YAML
            ValueError: If the document is not a mapping
        """
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("install-config must be a mapping")

        control_plane = data.get("controlPlane") or {}
        replicas = control_plane.get("replicas", 0)
        try:
            count = int(replicas)
        except (TypeError, ValueError):
            # Mirrors an unset count: discovery then waits for the deadline
            count = 0
        return cls(control_plane_replicas=max(count, 0))


class FlowsConfig(BaseModel):
    """IPFIX flow export settings read from the flows configuration map."""

    model_config = ConfigDict(frozen=True)

    target: str
    cache_active_timeout: int | None = None
    cache_max_flows: int | None = None
    sampling: int | None = None


class ClusterSnapshot(BaseModel):
    """Cluster facts gathered by one bootstrap call."""

    model_config = ConfigDict(frozen=True)

    members: tuple[str, ...]
    initiator_address: str
    external_control_plane: bool = False
    node_mode: NodeMode = NodeMode.FULL
    existing_master: TierState | None = None
    existing_node: TierState | None = None
    existing_prepull: TierState | None = None
    flows_config: FlowsConfig | None = None
    timed_out: bool = Field(default=False, description="Discovery hit its deadline")

    @field_validator("members")
    @classmethod
    def sort_members(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Keep members in lexicographic order."""
        return tuple(sorted(v))

    @property
    def is_single_node(self) -> bool:
        return len(self.members) == 1

    @property
    def min_available(self) -> int:
        """Quorum size of the replicated database."""
        return len(self.members) // 2 + 1

    @property
    def listen_dual_stack(self) -> str:
        """Listen suffix for the databases; IPv6 masters listen dual-stack."""
        if self.members and ":" in self.members[0]:
            return ":[::]"
        return ""

    def db_list(self, port: int) -> str:
        """Comma-separated database connection strings for every member."""
        return ",".join(f"ssl:{_join_host_port(ip, port)}" for ip in self.members)


def _join_host_port(host: str, port: int) -> str:
    try:
        if isinstance(ipaddress.ip_address(host), ipaddress.IPv6Address):
            return f"[{host}]:{port}"
    except ValueError:
        if ":" in host:
            return f"[{host}]:{port}"
    return f"{host}:{port}"
