"""Release version comparison.

Release versions follow SemVer 2.0, including pre-release builds such as
``4.11.0-0.nightly-2022-06-01-123456`` or ``4.11.0-fc.0``. A pre-release sorts
before its final release and build metadata is ignored.
"""

import semver

from network_rollout.logging_config import get_logger
from network_rollout.models.rollout import VersionDelta

logger = get_logger(__name__)


def parse_release_version(value: str) -> semver.Version | None:
    """Parse a release version, returning None if it has no known ordering.

    A missing minor or patch component is read as zero, so ``4.11`` is the
    same release as ``4.11.0``.
    """
    if not value:
        return None
    try:
        return semver.Version.parse(value, optional_minor_and_patch=True)
    except ValueError:
        return None


def classify(deployed: str, desired: str) -> VersionDelta:
    """Compare a deployed version against the desired release.

    Args:
        deployed: Version currently carried by the tier
        desired: Version the operator wants to roll out

    Returns:
        UPGRADE if the tier is older than the release, DOWNGRADE if newer,
        SAME if equal, UNKNOWN if either side cannot be ordered.
    """
    if deployed == desired:
        return VersionDelta.SAME

    deployed_version = parse_release_version(deployed)
    desired_version = parse_release_version(desired)
    if deployed_version is None or desired_version is None:
        logger.debug(f"Cannot order versions {deployed!r} and {desired!r}")
        return VersionDelta.UNKNOWN

    if deployed_version < desired_version:
        return VersionDelta.UPGRADE
    if deployed_version > desired_version:
        return VersionDelta.DOWNGRADE
    # Different spellings of the same release, e.g. "4.10" and "4.10.0+build.1"
    return VersionDelta.SAME
