"""Data models for the rolled-out tiers and their observed progress."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from network_rollout import names


class Tier(str, Enum):
    """Workload roles sequenced by the rollout engine."""

    MASTER = "master"
    NODE = "node"
    PREPULL = "prepull"


class IPFamilyMode(str, Enum):
    """Service addressing mode of the cluster."""

    SINGLE_STACK = "single-stack"
    DUAL_STACK = "dual-stack"

    @classmethod
    def from_pool_count(cls, count: int) -> "IPFamilyMode":
        """Derive the mode from the number of service address pools."""
        return cls.DUAL_STACK if count == 2 else cls.SINGLE_STACK


class ProgressStatus(BaseModel):
    """Rollout counters observed on a tier."""

    model_config = ConfigDict(frozen=True)

    desired_count: int = Field(default=0, ge=0)
    updated_count: int = Field(default=0, ge=0)
    available_count: int = Field(default=0, ge=0)
    unavailable_count: int = Field(default=0, ge=0)
    spec_generation: int = 0
    observed_generation: int = 0
    hung: bool = False


class TierState(BaseModel):
    """Read-only snapshot of a deployed tier."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    namespace: str = names.APPLIED_NAMESPACE
    name: str = ""
    version: str = ""
    family_mode: IPFamilyMode | None = None
    progress: ProgressStatus = Field(default_factory=ProgressStatus)
    # Live object as read from the cluster, kept for identity substitution
    manifest: dict | None = Field(default=None, repr=False)

    @field_validator("family_mode", mode="before")
    @classmethod
    def empty_family_mode_is_unset(cls, v):
        """An empty marker means the tier was never annotated."""
        if v == "":
            return None
        return v

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}/{self.name or self.tier.value}"

    @classmethod
    def from_daemonset(cls, tier: Tier, daemonset, manifest: dict | None = None) -> "TierState":
        """Build a tier snapshot from a ``V1DaemonSet`` returned by the Kubernetes API.

        Args:
            tier: Role of the daemonset
            daemonset: The live ``V1DaemonSet``
            manifest: Serialized form of the same object, if the caller has one
        """
        metadata = daemonset.metadata
        annotations = metadata.annotations or {}
        status = daemonset.status

        progress = ProgressStatus(
            desired_count=status.desired_number_scheduled or 0,
            updated_count=status.updated_number_scheduled or 0,
            available_count=status.number_available or 0,
            unavailable_count=status.number_unavailable or 0,
            spec_generation=metadata.generation or 0,
            observed_generation=status.observed_generation or 0,
            hung=names.ROLLOUT_HUNG_ANNOTATION in annotations,
        )

        family_mode = annotations.get(names.IP_FAMILY_MODE_ANNOTATION) or None
        if family_mode not in (None, *[m.value for m in IPFamilyMode]):
            # Unknown markers are treated like missing ones
            family_mode = None

        return cls(
            tier=tier,
            namespace=metadata.namespace,
            name=metadata.name,
            version=annotations.get(names.RELEASE_VERSION_ANNOTATION, ""),
            family_mode=family_mode,
            progress=progress,
            manifest=manifest,
        )
