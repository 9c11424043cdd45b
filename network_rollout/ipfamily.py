"""IP family (single-stack / dual-stack) migration gate.

A family conversion is rolled out on the master tier first, since it owns the
authoritative topology, and only then on the node tier. While a conversion is
in flight it takes precedence over version sequencing.
"""

from pydantic import BaseModel, ConfigDict

from network_rollout.logging_config import get_logger
from network_rollout.models.tier import IPFamilyMode, TierState
from network_rollout.progress import is_progressing

logger = get_logger(__name__)


class MigrationGateResult(BaseModel):
    """Outcome of the family migration gate."""

    model_config = ConfigDict(frozen=True)

    update_node: bool
    update_master: bool
    # True when a conversion is in flight and the sequencer must be skipped
    active: bool = False


def gate(
    existing_node: TierState | None,
    existing_master: TierState | None,
    desired_mode: IPFamilyMode,
) -> MigrationGateResult:
    """Decide tier updates for a pending IP family conversion.

    Args:
        existing_node: Deployed node tier, None on a fresh cluster
        existing_master: Deployed master tier, None on a fresh cluster
        desired_mode: Family mode derived from the service networks

    Returns:
        MigrationGateResult; ``active`` is False when no conversion is pending
    """
    if existing_node is None or existing_master is None:
        return MigrationGateResult(update_node=True, update_master=True)

    node_mode = existing_node.family_mode
    master_mode = existing_master.family_mode

    # Unannotated tiers predate family tracking; the marker gets written now
    if node_mode is None or master_mode is None:
        return MigrationGateResult(update_node=True, update_master=True)

    if node_mode is desired_mode and master_mode is desired_mode:
        return MigrationGateResult(update_node=True, update_master=True)

    if master_mode is not desired_mode:
        logger.info(f"IP family mode change detected to {desired_mode.value}, updating master tier")
        return MigrationGateResult(update_node=False, update_master=True, active=True)

    if is_progressing(existing_master, allow_hung=False):
        logger.info("Waiting for master tier IP family rollout before updating node tier")
        return MigrationGateResult(update_node=False, update_master=True, active=True)

    logger.info("Master tier IP family rollout complete, updating node tier")
    return MigrationGateResult(update_node=True, update_master=True, active=True)
