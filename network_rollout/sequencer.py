"""Version-skew sequencing between the master and node tiers.

On upgrade the node tier moves first and the master tier follows once the
nodes have rolled out. On downgrade the order reverses. Cells of the ordering
table that normal sequencing never produces are treated as fail-open.

    +-------------+---------------+-----------------+------------------+
    | node/master |    upgrade    |      same       |    downgrade     |
    +-------------+---------------+-----------------+------------------+
    | upgrade     | upgrade node  | inconsistent    | inconsistent     |
    | same        | wait for node | done            | inconsistent     |
    | downgrade   | inconsistent  | wait for master | downgrade master |
    +-------------+---------------+-----------------+------------------+
"""

from network_rollout.logging_config import get_logger
from network_rollout.models.rollout import VersionDelta
from network_rollout.models.tier import TierState
from network_rollout.progress import is_progressing
from network_rollout.versions import classify

logger = get_logger(__name__)


def sequence(
    existing_node: TierState | None, existing_master: TierState | None, release_version: str
) -> tuple[bool, bool]:
    """Decide which tiers may move towards the release.

    Args:
        existing_node: Deployed node tier, None on a fresh cluster
        existing_master: Deployed master tier, None on a fresh cluster
        release_version: Desired release version

    Returns:
        Tuple of (update_node, update_master)
    """
    if existing_node is None or existing_master is None:
        return True, True

    node_version = existing_node.version
    master_version = existing_master.version

    # Return True for both so that drift is still reconciled
    if node_version == release_version and master_version == release_version:
        logger.debug(
            f"Master and node tiers already at release {release_version}; no changes required"
        )
        return True, True

    master_delta = classify(master_version, release_version)
    node_delta = classify(node_version, release_version)
    logger.debug(f"Master tier {master_version} -> {release_version}; delta {master_delta.value}")
    logger.debug(f"Node tier {node_version} -> {release_version}; delta {node_delta.value}")

    return order(node_delta, master_delta, existing_node, existing_master)


def order(
    node_delta: VersionDelta,
    master_delta: VersionDelta,
    existing_node: TierState,
    existing_master: TierState,
) -> tuple[bool, bool]:
    """Apply the ordering table to a pair of version deltas.

    Returns:
        Tuple of (update_node, update_master)
    """
    if VersionDelta.UNKNOWN in (node_delta, master_delta):
        logger.warning(
            f"Could not determine update direction; node: {existing_node.version!r}, "
            f"master: {existing_master.version!r}"
        )
        return True, True

    if node_delta is VersionDelta.UPGRADE:
        if master_delta is VersionDelta.UPGRADE:
            logger.info("Upgrading node tier before master tier")
            return True, False
        return _inconsistent(existing_node, existing_master)

    if node_delta is VersionDelta.SAME:
        if master_delta is VersionDelta.UPGRADE:
            if is_progressing(existing_node, allow_hung=True):
                logger.info("Waiting for node tier update to roll out before updating master tier")
                return True, False
            logger.info("Node tier update rolled out; now updating master tier")
            return True, True
        if master_delta is VersionDelta.SAME:
            return True, True
        return _inconsistent(existing_node, existing_master)

    if node_delta is VersionDelta.DOWNGRADE:
        if master_delta is VersionDelta.DOWNGRADE:
            logger.info("Downgrading master tier before node tier")
            return False, True
        if master_delta is VersionDelta.SAME:
            if is_progressing(existing_master, allow_hung=False):
                logger.info(
                    "Waiting for master tier downgrade to roll out before downgrading node tier"
                )
                return False, True
            logger.info("Master tier downgrade rolled out; now downgrading node tier")
            return True, True
        return _inconsistent(existing_node, existing_master)

    raise ValueError(f"Unhandled version delta: {node_delta!r}")


def _inconsistent(existing_node: TierState, existing_master: TierState) -> tuple[bool, bool]:
    logger.warning(
        f"Tier versions inconsistent; node: {existing_node.version!r}, "
        f"master: {existing_master.version!r}. Updating both tiers"
    )
    return True, True
