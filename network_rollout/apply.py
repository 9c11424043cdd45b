"""Post-processing of rendered manifests according to a rollout decision."""

import copy

from network_rollout import names
from network_rollout.exceptions import ValidationError
from network_rollout.logging_config import get_logger
from network_rollout.models.rollout import RolloutDecision
from network_rollout.models.tier import IPFamilyMode, TierState

logger = get_logger(__name__)

ObjectKey = tuple[str, str, str, str]  # (group, kind, namespace, name)


def object_key(obj: dict) -> ObjectKey:
    api_version = obj.get("apiVersion", "")
    group = api_version.split("/")[0] if "/" in api_version else ""
    meta = obj.get("metadata", {}) or {}
    return (group, obj.get("kind", ""), meta.get("namespace", ""), meta.get("name", ""))


def _is_tier_daemonset(obj: dict) -> bool:
    meta = obj.get("metadata", {}) or {}
    return (
        obj.get("apiVersion") == "apps/v1"
        and obj.get("kind") == "DaemonSet"
        and meta.get("name") in (names.MASTER_DAEMONSET, names.NODE_DAEMONSET)
    )


def annotate_family_mode(objects: list[dict], mode: IPFamilyMode) -> None:
    """Mark the master and node daemonsets, and their pod templates, with the family mode.

    Annotating the pod template forces a rollout when the mode changes.
    """
    for obj in objects:
        if not _is_tier_daemonset(obj):
            continue

        meta = obj.setdefault("metadata", {})
        annotations = meta.get("annotations") or {}
        annotations[names.IP_FAMILY_MODE_ANNOTATION] = mode.value
        meta["annotations"] = annotations

        template = obj.setdefault("spec", {}).setdefault("template", {})
        if not isinstance(template, dict):
            raise ValidationError(f"DaemonSet {meta.get('name')} has a malformed pod template")
        template_meta = template.setdefault("metadata", {})
        template_annotations = template_meta.get("annotations") or {}
        template_annotations[names.IP_FAMILY_MODE_ANNOTATION] = mode.value
        template_meta["annotations"] = template_annotations


def replace_object(objects: list[dict], replacement: dict) -> list[dict]:
    """Swap the object with the same identity as ``replacement``."""
    key = object_key(replacement)
    return [copy.deepcopy(replacement) if object_key(o) == key else o for o in objects]


def remove_object(objects: list[dict], group: str, kind: str, namespace: str, name: str) -> list[dict]:
    return [o for o in objects if object_key(o) != (group, kind, namespace, name)]


def _existing_manifest(existing: TierState | None, tier_name: str) -> dict:
    if existing is None or existing.manifest is None:
        raise ValidationError(
            f"Cannot hold back {tier_name}: the existing object is not available",
            "A tier can only be held at its current state when it is already deployed",
        )
    manifest = copy.deepcopy(existing.manifest)
    manifest.setdefault("apiVersion", "apps/v1")
    manifest.setdefault("kind", "DaemonSet")
    return manifest


def apply_decision(
    objects: list[dict],
    decision: RolloutDecision,
    existing_master: TierState | None,
    existing_node: TierState | None,
) -> list[dict]:
    """Return the apply set for a decision.

    Tiers that must not update keep their existing object in place of the
    freshly rendered one; the prepull daemonset is dropped unless requested.

    Raises:
        ValidationError: If a held tier has no existing object to substitute
    """
    result = list(objects)

    if not decision.update_master:
        logger.info(f"Holding back {names.MASTER_DAEMONSET} at its current state")
        result = replace_object(result, _existing_manifest(existing_master, names.MASTER_DAEMONSET))
    if not decision.update_node:
        logger.info(f"Holding back {names.NODE_DAEMONSET} at its current state")
        result = replace_object(result, _existing_manifest(existing_node, names.NODE_DAEMONSET))

    if not decision.render_prepull:
        result = remove_object(
            result, "apps", "DaemonSet", names.APPLIED_NAMESPACE, names.PREPULL_DAEMONSET
        )

    return result
