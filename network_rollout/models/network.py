"""Data models for the cluster network configuration."""

from pydantic import BaseModel, ConfigDict, Field

from network_rollout.models.tier import IPFamilyMode


class ClusterNetworkEntry(BaseModel):
    """A pod address pool and the per-node prefix carved from it."""

    cidr: str
    host_prefix: int = 23


class HybridOverlayConfig(BaseModel):
    """Hybrid overlay settings for mixed-OS clusters."""

    hybrid_cluster_network: list[ClusterNetworkEntry] = Field(default_factory=list)
    vxlan_port: int | None = None


class IPsecConfig(BaseModel):
    """Presence enables IPsec between nodes."""


class GatewayConfig(BaseModel):
    """Node gateway settings."""

    routing_via_host: bool = False


class PolicyAuditConfig(BaseModel):
    """Network policy audit logging settings."""

    rate_limit: int | None = None
    max_file_size: int | None = None
    destination: str = ""
    syslog_facility: str = ""


class OVNKubernetesConfig(BaseModel):
    """Datapath-specific settings."""

    mtu: int | None = None
    geneve_port: int | None = None
    hybrid_overlay: HybridOverlayConfig | None = None
    ipsec: IPsecConfig | None = None
    gateway: GatewayConfig | None = None
    policy_audit: PolicyAuditConfig | None = None


class MTUValues(BaseModel):
    """A from/to MTU pair."""

    model_config = ConfigDict(populate_by_name=True)

    from_: int | None = Field(default=None, alias="from")
    to: int | None = None


class MTUMigration(BaseModel):
    """Requested MTU migration for the pod network and the machines."""

    network: MTUValues | None = None
    machine: MTUValues | None = None


class NetworkMigration(BaseModel):
    """In-flight configuration migrations."""

    mtu: MTUMigration | None = None


class NetworkSpec(BaseModel):
    """Cluster network configuration as declared on the owning object."""

    cluster_network: list[ClusterNetworkEntry] = Field(default_factory=list)
    service_network: list[str] = Field(default_factory=list)
    ovn: OVNKubernetesConfig = Field(default_factory=OVNKubernetesConfig)
    migration: NetworkMigration | None = None

    @property
    def ip_family_mode(self) -> IPFamilyMode:
        return IPFamilyMode.from_pool_count(len(self.service_network))

    @classmethod
    def from_operator_spec(cls, spec: dict) -> "NetworkSpec":
        """Parse the ``spec`` of the operator's ``Network`` object (camelCase keys)."""
        spec = spec or {}

        def networks(entries) -> list[ClusterNetworkEntry]:
            return [
                ClusterNetworkEntry(cidr=e["cidr"], host_prefix=e.get("hostPrefix", 23))
                for e in entries or []
            ]

        raw = (spec.get("defaultNetwork") or {}).get("ovnKubernetesConfig") or {}
        ovn = OVNKubernetesConfig(mtu=raw.get("mtu"), geneve_port=raw.get("genevePort"))
        if raw.get("hybridOverlayConfig") is not None:
            hybrid = raw["hybridOverlayConfig"]
            ovn.hybrid_overlay = HybridOverlayConfig(
                hybrid_cluster_network=networks(hybrid.get("hybridClusterNetwork")),
                vxlan_port=hybrid.get("hybridOverlayVXLANPort"),
            )
        if raw.get("ipsecConfig") is not None:
            ovn.ipsec = IPsecConfig()
        if raw.get("gatewayConfig") is not None:
            ovn.gateway = GatewayConfig(
                routing_via_host=bool(raw["gatewayConfig"].get("routingViaHost", False))
            )
        if raw.get("policyAuditConfig") is not None:
            audit = raw["policyAuditConfig"]
            ovn.policy_audit = PolicyAuditConfig(
                rate_limit=audit.get("rateLimit"),
                max_file_size=audit.get("maxFileSize"),
                destination=audit.get("destination", ""),
                syslog_facility=audit.get("syslogFacility", ""),
            )

        migration = None
        mtu = (spec.get("migration") or {}).get("mtu")
        if mtu is not None:
            migration = NetworkMigration(
                mtu=MTUMigration(
                    network=MTUValues(**mtu["network"]) if mtu.get("network") else None,
                    machine=MTUValues(**mtu["machine"]) if mtu.get("machine") else None,
                )
            )

        return cls(
            cluster_network=networks(spec.get("clusterNetwork")),
            service_network=list(spec.get("serviceNetwork") or []),
            ovn=ovn,
            migration=migration,
        )
