"""Control-plane discovery and database cluster initiator election."""

import time
from collections.abc import Callable
from typing import Protocol

from network_rollout import names
from network_rollout.exceptions import BootstrapError, ExternalControlPlaneError
from network_rollout.logging_config import get_logger
from network_rollout.models.cluster import (
    ClusterSnapshot,
    ControlPlaneMember,
    FlowsConfig,
    InstallConfig,
    NodeMode,
)
from network_rollout.models.tier import TierState
from network_rollout.state import StateStore

logger = get_logger(__name__)

DISCOVERY_POLL_INTERVAL = 5
DISCOVERY_TIMEOUT = 250
DISCOVERY_BACKOFF = 120
MIN_DISCOVERY_TIMEOUT = 10


class NodeDirectory(Protocol):
    """Read access to the cluster's control-plane nodes."""

    def list_control_plane_nodes(self) -> list[ControlPlaneMember]:
        """List nodes carrying the control-plane role label."""
        ...


class ClusterBootstrap:
    """Discovers control-plane membership and elects the database initiator.

    The discovery deadline adapts across calls: every time discovery times out
    without reaching the expected replica count, the deadline for later calls
    shrinks by ``backoff`` seconds (250s, 130s, then 10s for good). Clusters
    that never present the expected node set, such as single-node or
    assisted installs, stop blocking every pass for the full timeout.

    One instance should be kept per managed target; the deadline is instance
    state.
    """

    def __init__(
        self,
        directory: NodeDirectory,
        state: StateStore,
        poll_interval: float = DISCOVERY_POLL_INTERVAL,
        discovery_timeout: float = DISCOVERY_TIMEOUT,
        backoff: float = DISCOVERY_BACKOFF,
        min_timeout: float = MIN_DISCOVERY_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the bootstrapper.

        Args:
            directory: Source of control-plane nodes
            state: Store holding the persisted initiator annotation
            poll_interval: Seconds between discovery attempts
            discovery_timeout: Initial discovery deadline in seconds
            backoff: Seconds removed from the deadline after each timeout
            min_timeout: Floor applied when the deadline is not positive
            sleep: Sleep function, injectable for tests
            clock: Monotonic clock, injectable for tests
        """
        self.directory = directory
        self.state = state
        self.poll_interval = poll_interval
        self.discovery_timeout = discovery_timeout
        self.backoff = backoff
        self.min_timeout = min_timeout
        self._sleep = sleep
        self._clock = clock

    def discover_members(self, expected: int) -> tuple[list[str], bool]:
        """Poll the node directory until ``expected`` control-plane nodes are seen.

        Args:
            expected: Desired control-plane replica count

        Returns:
            Tuple of (sorted internal addresses, timed_out)

        Raises:
            BootstrapError: If the directory cannot be read or a member has no
                internal address
        """
        timeout = self.discovery_timeout
        if timeout <= 0:
            timeout = self.min_timeout
        deadline = self._clock() + timeout

        attempts = 0
        timed_out = False
        while True:
            try:
                nodes = self.directory.list_control_plane_nodes()
            except Exception as e:
                logger.error(f"Failed to list control-plane nodes: {e}")
                raise BootstrapError(
                    "Unable to bootstrap: failed to list control-plane nodes",
                    str(e),
                ) from e

            if nodes and len(nodes) == expected:
                break

            attempts += 1
            remaining = deadline - self._clock()
            if attempts % 3 == 0:
                logger.debug(
                    f"Waiting to complete bootstrap: found ({len(nodes)}) control-plane nodes "
                    f"out of ({expected}) expected: timing out in {max(remaining, 0):.0f} seconds"
                )
            if remaining < self.poll_interval:
                timed_out = True
                break
            self._sleep(self.poll_interval)

        if timed_out:
            logger.warning(
                f"Timeout exceeded while bootstrapping, expected amount of control-plane nodes "
                f"({expected}) do not match found ({len(nodes)}), continuing with found replicas"
            )
            # Never reach zero, a non-positive deadline would mean polling forever
            if self.discovery_timeout - self.backoff > 0:
                self.discovery_timeout -= self.backoff
                logger.debug(f"Discovery deadline shrunk to {self.discovery_timeout} seconds")

        addresses = []
        for node in nodes:
            if not node.internal_address:
                raise BootstrapError(f"No InternalIP found on control-plane node '{node.name}'")
            addresses.append(node.internal_address)

        return sorted(addresses), timed_out

    def elect_initiator(self, members: list[str]) -> str:
        """Return the database cluster initiator, persisting a new one if needed.

        A persisted initiator is reused while it is still a member, so the
        replicated database is always initialized from the same node.

        Raises:
            BootstrapError: If there are no members to elect from
        """
        current = self.state.get(names.CLUSTER_INITIATOR_ANNOTATION)
        if current and current in members:
            logger.debug(f"Keeping database cluster initiator {current}")
            return current

        if not members:
            raise BootstrapError(
                "Unable to elect a database cluster initiator",
                "No control-plane nodes were discovered",
            )

        initiator = sorted(members)[0]
        if current:
            logger.info(f"Database cluster initiator {current} left the cluster, electing {initiator}")
        else:
            logger.info(f"Electing database cluster initiator {initiator}")
        self.state.set(names.CLUSTER_INITIATOR_ANNOTATION, initiator)
        return initiator

    def bootstrap(
        self,
        install_config: InstallConfig,
        external_control_plane: bool = False,
        existing_master: TierState | None = None,
        existing_node: TierState | None = None,
        existing_prepull: TierState | None = None,
        node_mode: NodeMode = NodeMode.FULL,
        flows_config: FlowsConfig | None = None,
    ) -> ClusterSnapshot:
        """Produce the cluster snapshot for one reconciliation pass.

        Raises:
            ExternalControlPlaneError: If the control plane is hosted outside the cluster
            BootstrapError: If discovery or election fails
        """
        if external_control_plane:
            raise ExternalControlPlaneError(
                "Unable to roll out in a cluster with an external control plane",
                "There are no control-plane nodes to target with the master tier",
            )

        members, timed_out = self.discover_members(install_config.control_plane_replicas)
        initiator = self.elect_initiator(members)

        return ClusterSnapshot(
            members=tuple(members),
            initiator_address=initiator,
            external_control_plane=external_control_plane,
            node_mode=node_mode,
            existing_master=existing_master,
            existing_node=existing_node,
            existing_prepull=existing_prepull,
            flows_config=flows_config,
            timed_out=timed_out,
        )
