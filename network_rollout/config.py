"""Runtime configuration for the rollout engine."""

import os
import re

import yaml
from pydantic import BaseModel, field_validator

from network_rollout import bootstrap, names
from network_rollout.exceptions import ConfigurationError


class RolloutConfig(BaseModel):
    """Settings for a reconciliation pass."""

    release_version: str = ""
    namespace: str = names.APPLIED_NAMESPACE
    operator_namespace: str = names.OPERATOR_NAMESPACE
    control_plane_label: str = names.CONTROL_PLANE_LABEL
    poll_interval: float = bootstrap.DISCOVERY_POLL_INTERVAL
    discovery_timeout: float = bootstrap.DISCOVERY_TIMEOUT
    discovery_backoff: float = bootstrap.DISCOVERY_BACKOFF
    min_discovery_timeout: float = bootstrap.MIN_DISCOVERY_TIMEOUT

    @field_validator("namespace", "operator_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Validate namespaces follow DNS label conventions."""
        if not re.match(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$", v) or len(v) > 63:
            raise ValueError(f"namespace '{v}' is not a valid DNS label")
        return v

    @field_validator("control_plane_label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Validate the control-plane label key is not empty."""
        if not v:
            raise ValueError("control_plane_label cannot be empty")
        return v

    @field_validator("poll_interval", "discovery_timeout", "min_discovery_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate intervals are positive."""
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("discovery_backoff")
    @classmethod
    def validate_backoff(cls, v: float) -> float:
        """Validate the backoff is not negative."""
        if v < 0:
            raise ValueError(f"discovery_backoff cannot be negative, got {v}")
        return v

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str) -> "RolloutConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {path}", str(e)) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Configuration file is not valid YAML: {path}", str(e)) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
        try:
            return cls(**data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration in {path}", str(e)) from e

    @classmethod
    def from_env(cls, base: "RolloutConfig | None" = None) -> "RolloutConfig":
        """Overlay settings from the process environment.

        ``RELEASE_VERSION`` sets the desired release; ``OVN_NAMESPACE`` the
        datapath namespace.
        """
        data = (base or cls()).model_dump()
        if os.environ.get("RELEASE_VERSION"):
            data["release_version"] = os.environ["RELEASE_VERSION"]
        if os.environ.get("OVN_NAMESPACE"):
            data["namespace"] = os.environ["OVN_NAMESPACE"]
        try:
            return cls(**data)
        except ValueError as e:
            raise ConfigurationError("Invalid configuration from environment", str(e)) from e
