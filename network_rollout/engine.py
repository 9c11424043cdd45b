"""One reconciliation pass: bootstrap, then decide how far each tier may move."""

from dataclasses import dataclass
from typing import Protocol

from network_rollout import names
from network_rollout.bootstrap import ClusterBootstrap
from network_rollout.config_maps import parse_flows_config, resolve_gateway_mode, resolve_node_mode
from network_rollout.exceptions import (
    BootstrapError,
    ChangeNotSafeError,
    KubernetesError,
    ValidationError,
)
from network_rollout.ipfamily import gate
from network_rollout.logging_config import get_logger
from network_rollout.models.cluster import (
    ClusterSnapshot,
    FlowsConfig,
    GatewayMode,
    InstallConfig,
    NodeMode,
)
from network_rollout.models.network import NetworkSpec
from network_rollout.models.rollout import RolloutDecision
from network_rollout.models.tier import IPFamilyMode, Tier, TierState
from network_rollout.prepull import stage
from network_rollout.sequencer import sequence
from network_rollout.validation import is_change_safe, set_gateway_config, validate_network

logger = get_logger(__name__)


class ClusterSource(Protocol):
    """Cluster reads needed by a pass."""

    def read_install_config(self) -> InstallConfig: ...

    def is_external_control_plane(self) -> bool: ...

    def read_tier(self, tier: Tier) -> TierState | None: ...

    def read_config_map(self, name: str) -> dict[str, str] | None: ...


@dataclass
class PassResult:
    """Everything a pass hands to the renderer and the apply layer."""

    snapshot: ClusterSnapshot
    decision: RolloutDecision
    family_mode: IPFamilyMode
    gateway_mode: GatewayMode
    migration_active: bool


def decide(
    snapshot: ClusterSnapshot, family_mode: IPFamilyMode, release_version: str
) -> tuple[RolloutDecision, bool]:
    """Compute the rollout decision for a bootstrapped cluster.

    An in-flight IP family conversion fully determines the outcome; version
    sequencing only runs when none is pending. Node updates are further gated
    on the image prepull.

    Returns:
        Tuple of (decision, migration_active)
    """
    node = snapshot.existing_node
    master = snapshot.existing_master

    migration = gate(node, master, family_mode)
    update_node, update_master = migration.update_node, migration.update_master
    if not migration.active:
        update_node, update_master = sequence(node, master, release_version)

    render_prepull = False
    if update_node:
        update_node, render_prepull = stage(node, snapshot.existing_prepull, release_version)

    decision = RolloutDecision(
        update_master=update_master, update_node=update_node, render_prepull=render_prepull
    )
    logger.info(f"Rollout decision for release {release_version}: {decision}")
    return decision, migration.active


class RolloutEngine:
    """Runs reconciliation passes against a cluster source.

    Keep one engine per managed target so its bootstrapper's adaptive
    discovery deadline is not shared.
    """

    def __init__(self, source: ClusterSource, bootstrapper: ClusterBootstrap, release_version: str):
        self.source = source
        self.bootstrapper = bootstrapper
        self.release_version = release_version

    def _node_mode(self) -> NodeMode:
        try:
            data = self.source.read_config_map(names.NODE_MODE_CONFIGMAP)
        except KubernetesError as e:
            raise BootstrapError("Could not determine node mode", e.message) from e
        return resolve_node_mode(data)

    def _gateway_mode(self, spec: NetworkSpec) -> GatewayMode:
        if spec.ovn.gateway is not None:
            return GatewayMode.LOCAL if spec.ovn.gateway.routing_via_host else GatewayMode.SHARED
        try:
            data = self.source.read_config_map(names.GATEWAY_MODE_CONFIGMAP)
        except KubernetesError as e:
            logger.info(f"Could not read {names.GATEWAY_MODE_CONFIGMAP}: {e.message}")
            data = None
        mode = resolve_gateway_mode(data)
        set_gateway_config(spec, routing_via_host=mode is GatewayMode.LOCAL)
        return mode

    def _flows_config(self) -> FlowsConfig | None:
        try:
            data = self.source.read_config_map(names.FLOWS_CONFIGMAP)
        except KubernetesError as e:
            logger.warning(f"{names.FLOWS_CONFIGMAP}: error fetching configmap: {e.message}")
            return None
        return parse_flows_config(data)

    def run_pass(self, spec: NetworkSpec, previous: NetworkSpec | None = None) -> PassResult:
        """Run one pass.

        Args:
            spec: Desired network configuration
            previous: Last applied configuration, if any

        Raises:
            ValidationError: If the configuration is invalid
            ChangeNotSafeError: If immutable fields changed
            BootstrapError: If the cluster facts cannot be established
        """
        errors = validate_network(spec)
        if errors:
            raise ValidationError("Invalid network configuration", "\n".join(errors))
        if previous is not None:
            errors = is_change_safe(previous, spec)
            if errors:
                raise ChangeNotSafeError(errors)

        external_control_plane = self.source.is_external_control_plane()
        install_config = self.source.read_install_config()
        node_mode = self._node_mode()
        gateway_mode = self._gateway_mode(spec)

        existing_master = self.source.read_tier(Tier.MASTER)
        existing_node = self.source.read_tier(Tier.NODE)
        existing_prepull = self.source.read_tier(Tier.PREPULL)

        snapshot = self.bootstrapper.bootstrap(
            install_config,
            external_control_plane=external_control_plane,
            existing_master=existing_master,
            existing_node=existing_node,
            existing_prepull=existing_prepull,
            node_mode=node_mode,
            flows_config=self._flows_config(),
        )

        family_mode = spec.ip_family_mode
        decision, migration_active = decide(snapshot, family_mode, self.release_version)
        return PassResult(
            snapshot=snapshot,
            decision=decision,
            family_mode=family_mode,
            gateway_mode=gateway_mode,
            migration_active=migration_active,
        )
