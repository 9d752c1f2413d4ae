"""Exceptions raised by the subscription controller."""


class ControllerError(Exception):
    """Base class for all controller errors."""


class ConfigurationError(ControllerError):
    """Required process configuration is missing or malformed."""


class InvalidEventError(ControllerError, ValueError):
    """A subscription callback body cannot be used to derive a tenant host."""


class ProvisioningError(ControllerError):
    """The routing resource for a tenant could not be brought to the desired state."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to provision APIRule {name}: {reason}")


class TemporaryError(ProvisioningError):
    """Provisioning failed for a reason that is expected to clear on retry (timeouts)."""

    def __init__(self, name: str, reason: str):
        super().__init__(name, reason)
        self.args = (f"Temporary failure provisioning APIRule {name}, retry later: {reason}",)
