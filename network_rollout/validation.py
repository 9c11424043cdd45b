"""Network configuration checks and defaults.

Change-safety checks compare each immutable field explicitly so that only the
fields that matter are looked at.
"""

import ipaddress

from network_rollout.models.network import (
    ClusterNetworkEntry,
    GatewayConfig,
    HybridOverlayConfig,
    NetworkSpec,
    PolicyAuditConfig,
)

MIN_MTU = 576
MAX_MTU = 65536
DEFAULT_GENEVE_PORT = 6081
GENEVE_OVERHEAD = 100
# Transport mode, AES-GCM
IPSEC_OVERHEAD = 46


def _is_ipv6_cidr(cidr: str) -> bool:
    try:
        return ipaddress.ip_network(cidr, strict=False).version == 6
    except ValueError:
        return ":" in cidr


def validate_network(spec: NetworkSpec) -> list[str]:
    """Check that the network configuration is basically sane.

    Returns:
        List of error messages; empty if the configuration is valid
    """
    errors: list[str] = []

    cn_has_v4 = cn_has_v6 = False
    for entry in spec.cluster_network:
        if _is_ipv6_cidr(entry.cidr):
            cn_has_v6 = True
        else:
            cn_has_v4 = True
    if not cn_has_v4 and not cn_has_v6:
        errors.append("ClusterNetwork cannot be empty")

    sn_has_v4 = sn_has_v6 = False
    for cidr in spec.service_network:
        if _is_ipv6_cidr(cidr):
            sn_has_v6 = True
        else:
            sn_has_v4 = True
    if not sn_has_v4 and not sn_has_v6:
        errors.append("ServiceNetwork cannot be empty")

    if cn_has_v4 != sn_has_v4 or cn_has_v6 != sn_has_v6:
        errors.append("ClusterNetwork and ServiceNetwork must have matching IP families")

    if len(spec.service_network) > 2 or (
        len(spec.service_network) == 2 and not (sn_has_v4 and sn_has_v6)
    ):
        errors.append("ServiceNetwork must have either a single CIDR or a dual-stack pair of CIDRs")

    ovn = spec.ovn
    if ovn.mtu is not None and not MIN_MTU <= ovn.mtu <= MAX_MTU:
        errors.append(f"invalid MTU {ovn.mtu}")
    if ovn.geneve_port is not None and not 1 <= ovn.geneve_port <= 65535:
        errors.append(f"invalid GenevePort {ovn.geneve_port}")

    return errors


def encap_overhead(spec: NetworkSpec) -> int:
    """Bytes of encapsulation overhead the datapath adds to each packet."""
    overhead = GENEVE_OVERHEAD
    if spec.ovn.ipsec is not None:
        overhead += IPSEC_OVERHEAD
    return overhead


def fill_defaults(spec: NetworkSpec, previous: NetworkSpec | None, host_mtu: int) -> None:
    """Fill unset datapath fields in place.

    The MTU can never change once applied, so the previous value is preferred
    over one inferred from the host.
    """
    ovn = spec.ovn
    if ovn.mtu is None:
        if previous is not None and previous.ovn.mtu is not None:
            ovn.mtu = previous.ovn.mtu
        else:
            ovn.mtu = host_mtu - encap_overhead(spec)
    if ovn.geneve_port is None:
        ovn.geneve_port = DEFAULT_GENEVE_PORT

    if ovn.policy_audit is None:
        ovn.policy_audit = PolicyAuditConfig()
    audit = ovn.policy_audit
    if audit.rate_limit is None:
        audit.rate_limit = 20
    if audit.max_file_size is None:
        audit.max_file_size = 50
    if not audit.destination:
        audit.destination = "null"
    if not audit.syslog_facility:
        audit.syslog_facility = "local0"


def set_gateway_config(spec: NetworkSpec, routing_via_host: bool) -> None:
    """Record the gateway configuration unless one is already declared."""
    if spec.ovn.gateway is None:
        spec.ovn.gateway = GatewayConfig(routing_via_host=routing_via_host)


def _same_networks(a: list[ClusterNetworkEntry], b: list[ClusterNetworkEntry]) -> bool:
    if len(a) != len(b):
        return False
    return all(x.cidr == y.cidr and x.host_prefix == y.host_prefix for x, y in zip(a, b))


def _same_hybrid_overlay(a: HybridOverlayConfig, b: HybridOverlayConfig | None) -> bool:
    if b is None:
        return False
    return a.vxlan_port == b.vxlan_port and _same_networks(
        a.hybrid_cluster_network, b.hybrid_cluster_network
    )


def _mtu_migration_errors(prev: NetworkSpec, next_spec: NetworkSpec) -> list[str]:
    migration = next_spec.migration.mtu
    net = migration.network
    machine = migration.machine

    if net is None or machine is None or net.from_ is None or net.to is None or machine.to is None:
        return ["invalid Migration.MTU, at least one of the required fields is missing"]

    errors = []
    prev_net = prev.migration.mtu.network if prev.migration and prev.migration.mtu else None
    # Only check Migration.MTU.Network.From when it changes
    from_changed = prev_net is None or prev_net.from_ != net.from_
    if from_changed and net.from_ != prev.ovn.mtu:
        errors.append(
            f"invalid Migration.MTU.Network.From({net.from_}) not equal to the currently "
            f"applied MTU({prev.ovn.mtu})"
        )

    required = net.to + encap_overhead(next_spec)
    if required > machine.to:
        errors.append(f"invalid Migration.MTU.Machine.To({machine.to}), has to be at least {required}")
    return errors


def is_change_safe(prev: NetworkSpec, next_spec: NetworkSpec) -> list[str]:
    """List the changes to immutable datapath fields between two configurations.

    Returns:
        List of error messages; empty if the change is safe
    """
    errors: list[str] = []
    pn = prev.ovn
    nn = next_spec.ovn

    if next_spec.migration is not None and next_spec.migration.mtu is not None:
        errors.extend(_mtu_migration_errors(prev, next_spec))
    elif pn.mtu != nn.mtu:
        errors.append("cannot change ovn-kubernetes MTU without migration")

    if pn.geneve_port != nn.geneve_port:
        errors.append("cannot change ovn-kubernetes genevePort")

    if pn.hybrid_overlay is None and nn.hybrid_overlay is not None:
        errors.append("cannot start a hybrid overlay network after install time")
    if pn.hybrid_overlay is not None and not _same_hybrid_overlay(pn.hybrid_overlay, nn.hybrid_overlay):
        errors.append("cannot edit a running hybrid overlay network")

    if pn.ipsec is None and nn.ipsec is not None:
        errors.append("cannot enable IPsec after install time")
    if pn.ipsec is not None and nn.ipsec is None:
        errors.append("cannot edit IPsec configuration at runtime")

    return errors
