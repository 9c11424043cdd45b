"""Image prepull staging ahead of node tier updates.

Before the node tier moves to a new release, a no-op workload that only pulls
the new image is rolled out to every node. The node update is held until that
workload has rolled out (or hung close enough to completion), so the actual
node rollout does not stall on image downloads.
"""

from network_rollout.logging_config import get_logger
from network_rollout.models.tier import TierState
from network_rollout.progress import is_progressing

logger = get_logger(__name__)


def stage(
    existing_node: TierState | None, prepull: TierState | None, release_version: str
) -> tuple[bool, bool]:
    """Decide whether the node tier may update and whether to render the prepull workload.

    Args:
        existing_node: Deployed node tier, None on a fresh cluster
        prepull: Deployed prepull workload, None if it was never rendered
        release_version: Desired release version

    Returns:
        Tuple of (permit_node_update, render_prepull)
    """
    if existing_node is None:
        logger.debug("Fresh cluster, no need for prepull")
        return True, False

    # Already at the release: let the update through to reconcile any drift
    if existing_node.version == release_version:
        logger.debug("Node tier is already at the expected release")
        return True, False

    if prepull is None:
        logger.info("Rolling out the no-op prepull workload")
        return False, True

    # A quick upgrade-then-downgrade leaves the prepull at the wrong image
    if prepull.version != release_version:
        logger.info(
            f"Prepull workload is at {prepull.version or 'unknown'}, "
            f"re-rendering it for {release_version}"
        )
        return False, True

    if is_progressing(prepull, allow_hung=True):
        logger.info("Waiting for the prepull workload to finish pulling before updating node tier")
        return False, True

    logger.info("Prepull rollout complete, starting node tier rollout")
    return True, False
