"""Rollout progress evaluation for a tier."""

import math

from network_rollout.logging_config import get_logger
from network_rollout.models.tier import TierState

logger = get_logger(__name__)

# Fraction of replicas allowed to lag behind when a rollout is marked hung
HUNG_TOLERANCE = 0.1


def is_progressing(tier: TierState, allow_hung: bool) -> bool:
    """Return True if the tier is still rolling out a change.

    If ``allow_hung`` is set, a rollout carrying the hang marker with at most
    ``max(1, 10%)`` replicas behind is treated as complete.
    """
    status = tier.progress

    progressing = (
        status.updated_count < status.desired_count
        or status.unavailable_count > 0
        or status.available_count == 0
        or status.spec_generation > status.observed_generation
    )

    logger.debug(
        f"{tier.tier.value} tier {tier.qualified_name} rollout "
        f"{'progressing' if progressing else 'complete'}; "
        f"{status.updated_count}/{status.desired_count} updated; "
        f"{status.unavailable_count} unavailable; {status.available_count} available; "
        f"generation {status.spec_generation} -> {status.observed_generation}"
    )

    if not progressing:
        return False

    if allow_hung:
        max_behind = max(1, math.floor(status.desired_count * HUNG_TOLERANCE))
        behind = status.desired_count - status.updated_count
        if status.hung and behind <= max_behind:
            logger.warning(
                f"{tier.tier.value} tier {tier.qualified_name} rollout seems to have hung "
                f"with {behind}/{status.desired_count} behind, force-continuing"
            )
            return False

    return True
