"""Custom exceptions for the rollout engine."""


class NetworkRolloutError(Exception):
    """Base exception for all rollout engine errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class ConfigurationError(NetworkRolloutError):
    """Exception raised for configuration errors."""

    pass


class KubernetesError(NetworkRolloutError):
    """Exception raised for Kubernetes API errors."""

    pass


class BootstrapError(NetworkRolloutError):
    """Exception raised when cluster bootstrap cannot complete."""

    pass


class ExternalControlPlaneError(BootstrapError):
    """Exception raised when the control plane is hosted outside the cluster."""

    pass


class ValidationError(NetworkRolloutError):
    """Exception raised for validation errors."""

    pass


class ChangeNotSafeError(ValidationError):
    """Exception raised when a configuration change touches immutable fields.

    All offending fields are collected in ``errors`` so they can be surfaced
    together.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            "Refusing to apply unsafe network configuration change",
            "\n".join(f"- {e}" for e in self.errors),
        )
