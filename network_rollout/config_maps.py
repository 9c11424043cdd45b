"""Interpretation of the auxiliary configuration maps.

These maps are optional: missing or malformed values never abort a pass, they
are logged and the corresponding feature keeps its default.
"""

import re

from network_rollout import names
from network_rollout.logging_config import get_logger
from network_rollout.models.cluster import FlowsConfig, GatewayMode, NodeMode

logger = get_logger(__name__)

UINT32_MAX = 2**32 - 1

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """Parse a duration such as ``"90s"``, ``"1m30s"`` or ``"1.5h"`` into seconds.

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return sign * total


def _parse_uint32(value: str) -> int:
    if not re.fullmatch(r"[0-9]+", value):
        raise ValueError(f"{value!r} is not an unsigned integer")
    number = int(value)
    if number > UINT32_MAX:
        raise ValueError(f"{value!r} is out of range")
    return number


def resolve_node_mode(data: dict[str, str] | None) -> NodeMode:
    """Return the node mode override, or ``NodeMode.FULL`` when none applies."""
    if data is None:
        logger.info(f"Did not find {names.NODE_MODE_CONFIGMAP}")
        return NodeMode.FULL

    override = data.get("mode", "")
    if override not in (NodeMode.DPU.value, NodeMode.DPU_HOST.value):
        logger.warning(
            f"{names.NODE_MODE_CONFIGMAP} does not match {NodeMode.DPU_HOST.value!r} or "
            f"{NodeMode.DPU.value!r}, is: {override!r}. Using {NodeMode.FULL.value} mode"
        )
        return NodeMode.FULL

    logger.info(f"Overriding node mode to {override}")
    return NodeMode(override)


def resolve_gateway_mode(data: dict[str, str] | None) -> GatewayMode:
    """Return the gateway mode requested by the legacy gateway configuration map."""
    if data is None:
        logger.info(
            f"Did not find {names.GATEWAY_MODE_CONFIGMAP}. "
            f"Using default gateway mode: {GatewayMode.SHARED.value}"
        )
        return GatewayMode.SHARED

    override = data.get("mode", "")
    try:
        mode = GatewayMode(override)
    except ValueError:
        logger.warning(
            f"{names.GATEWAY_MODE_CONFIGMAP} does not match {GatewayMode.LOCAL.value!r} or "
            f"{GatewayMode.SHARED.value!r}, is: {override!r}. "
            f"Using default gateway mode: {GatewayMode.SHARED.value}"
        )
        mode = GatewayMode.SHARED

    logger.info(f"Gateway mode is {mode.value}")
    return mode


def parse_flows_config(data: dict[str, str] | None) -> FlowsConfig | None:
    """Build the flow export settings from the flows configuration map.

    Returns:
        FlowsConfig, or None if the map is absent or has no usable target
    """
    if data is None:
        return None

    if "sharedTarget" in data:
        target = data["sharedTarget"]
    elif "nodePort" in data:
        # An empty host is interpreted as the node IP by the node tier
        target = ":" + data["nodePort"]
    else:
        logger.warning(
            f"{names.FLOWS_CONFIGMAP}: wrong data section: either sharedTarget or nodePort "
            f"sections are needed: {data}"
        )
        return None

    cache_active_timeout = None
    if "cacheActiveTimeout" in data:
        raw = data["cacheActiveTimeout"]
        try:
            seconds = parse_duration(raw)
            if seconds < 0:
                raise ValueError("negative duration")
        except ValueError as e:
            logger.warning(
                f"{names.FLOWS_CONFIGMAP}: wrong cacheActiveTimeout value {raw}. Ignoring: {e}"
            )
        else:
            cache_active_timeout = int(seconds)
            if seconds != cache_active_timeout:
                logger.warning(
                    f"{names.FLOWS_CONFIGMAP}: cacheActiveTimeout {raw} will be truncated "
                    f"to {cache_active_timeout} seconds"
                )

    cache_max_flows = None
    if "cacheMaxFlows" in data:
        raw = data["cacheMaxFlows"]
        try:
            cache_max_flows = _parse_uint32(raw)
        except ValueError as e:
            logger.warning(f"{names.FLOWS_CONFIGMAP}: wrong cacheMaxFlows value {raw}. Ignoring: {e}")

    sampling = None
    if "sampling" in data:
        raw = data["sampling"]
        try:
            sampling = _parse_uint32(raw)
        except ValueError as e:
            logger.warning(f"{names.FLOWS_CONFIGMAP}: wrong sampling value {raw}. Ignoring: {e}")

    return FlowsConfig(
        target=target,
        cache_active_timeout=cache_active_timeout,
        cache_max_flows=cache_max_flows,
        sampling=sampling,
    )


def merge_ipfix_collectors(collectors: str, flows: FlowsConfig | None) -> str:
    """Append the flows map target to the IPFIX collectors from the network configuration."""
    if flows is None:
        return collectors
    if not flows.target:
        logger.warning(
            f"{names.FLOWS_CONFIGMAP} 'target' field can't be empty. Ignoring configuration"
        )
        return collectors
    if not collectors:
        return flows.target
    return f"{collectors},{flows.target}"
