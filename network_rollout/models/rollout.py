"""Data models for rollout decisions."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class VersionDelta(str, Enum):
    """How a deployed version compares to the desired release version."""

    UPGRADE = "upgrade"
    SAME = "same"
    DOWNGRADE = "downgrade"
    UNKNOWN = "unknown"


class RolloutDecision(BaseModel):
    """Per-tier update permissions produced by one reconciliation pass."""

    model_config = ConfigDict(frozen=True)

    update_master: bool = True
    update_node: bool = True
    render_prepull: bool = False

    def __str__(self) -> str:
        return (
            f"master={'update' if self.update_master else 'hold'} "
            f"node={'update' if self.update_node else 'hold'} "
            f"prepull={'render' if self.render_prepull else 'drop'}"
        )
