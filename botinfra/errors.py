"""Error taxonomy for provisioning failures."""
from typing import Optional


class ProvisioningError(Exception):
    """Base class for every failure surfaced to the operator."""

    def __init__(self, message: str, resource: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.code = code

    def __str__(self) -> str:
        prefix = f"[{self.resource}] " if self.resource else ""
        suffix = f" ({self.code})" if self.code else ""
        return f"{prefix}{self.message}{suffix}"


class ManifestError(ProvisioningError):
    """Raised when the infrastructure manifest cannot be loaded or is invalid."""


class ParameterValidationError(ProvisioningError):
    """A parameter value lies outside its allowed set."""


class NameConflictError(ProvisioningError):
    """A resource name is already taken by an incompatible resource."""


class QuotaExceededError(ProvisioningError):
    """The provider rejected a resource for lack of quota or capacity."""


class DependencyResolutionError(ProvisioningError):
    """A computed binding references a source that cannot supply the value."""


class DeploymentError(ProvisioningError):
    """Any other failure reported by the provisioning engine."""
