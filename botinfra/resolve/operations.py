"""Resolution operations shared by every resolver."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..errors import DependencyResolutionError
from ..graph import kinds

HOSTING_DOMAIN = "azurewebsites.net"
SEARCH_DOMAIN = "search.windows.net"
BOT_MESSAGES_PATH = "/api/messages"


class ResolveOp(str, Enum):
    """A value obtainable from a declared resource."""
    NAME = "name"
    ID = "id"
    ENDPOINT = "endpoint"
    PRIMARY_KEY = "primaryKey"
    CONNECTION_STRING = "connectionString"
    PRINCIPAL_ID = "principalId"
    TENANT_ID = "tenantId"
    HOSTNAME = "hostname"
    SECRET_URI = "secretUri"


_COMMON = {ResolveOp.NAME, ResolveOp.ID}

SUPPORTED_OPERATIONS = {
    kinds.KEY_VAULT: _COMMON | {ResolveOp.ENDPOINT},
    kinds.KEY_VAULT_SECRET: _COMMON | {ResolveOp.SECRET_URI},
    kinds.STORAGE_ACCOUNT: _COMMON | {ResolveOp.PRIMARY_KEY, ResolveOp.CONNECTION_STRING},
    kinds.COSMOS_ACCOUNT: _COMMON | {ResolveOp.ENDPOINT, ResolveOp.PRIMARY_KEY, ResolveOp.CONNECTION_STRING},
    kinds.SEARCH_SERVICE: _COMMON | {ResolveOp.ENDPOINT, ResolveOp.PRIMARY_KEY},
    kinds.COGNITIVE_ACCOUNT: _COMMON | {ResolveOp.ENDPOINT, ResolveOp.PRIMARY_KEY},
    kinds.COGNITIVE_DEPLOYMENT: _COMMON,
    kinds.SERVER_FARM: _COMMON,
    kinds.WEB_SITE: _COMMON | {ResolveOp.HOSTNAME, ResolveOp.PRINCIPAL_ID, ResolveOp.TENANT_ID},
    kinds.WEB_SITE_SLOT: _COMMON | {ResolveOp.PRINCIPAL_ID, ResolveOp.TENANT_ID},
    kinds.BOT_SERVICE: _COMMON,
    kinds.ROLE_ASSIGNMENT: _COMMON,
}

# Only available once a system-assigned identity has been created
IDENTITY_OPERATIONS = {ResolveOp.PRINCIPAL_ID, ResolveOp.TENANT_ID}


@dataclass(frozen=True)
class ResourceHandle:
    """What a resolver needs to know about a declared resource."""
    symbol: str
    type: str
    name: Optional[str]
    has_identity: bool = False
    parent_name: Optional[str] = None


class _Deferred:
    """Marker for values only the provisioning engine can produce."""

    def __repr__(self) -> str:
        return "DEFERRED"


DEFERRED = _Deferred()


def ensure_supported(handle: ResourceHandle, operation: ResolveOp) -> None:
    """Raise if the source type does not guarantee the value after creation.

    Raises:
        DependencyResolutionError: If the operation is not available on the handle.
    """
    supported = SUPPORTED_OPERATIONS.get(handle.type, _COMMON)
    if operation not in supported:
        raise DependencyResolutionError(
            f"{handle.type} does not expose '{operation.value}'",
            resource=handle.symbol,
        )
    if operation in IDENTITY_OPERATIONS and not handle.has_identity:
        raise DependencyResolutionError(
            f"'{operation.value}' requires a system-assigned identity",
            resource=handle.symbol,
        )


def search_endpoint(search_name: str) -> str:
    return f"https://{search_name}.{SEARCH_DOMAIN}"


def web_hostname(web_app_name: str) -> str:
    return f"{web_app_name}.{HOSTING_DOMAIN}"


def bot_messaging_endpoint(web_app_name: str) -> str:
    """Callback URL the bot channel posts activities to."""
    return f"https://{web_hostname(web_app_name)}{BOT_MESSAGES_PATH}"


def storage_connection_string(account_name: str, account_key: str, endpoint_suffix: str) -> str:
    return (
        f"DefaultEndpointsProtocol=https;AccountName={account_name};"
        f"AccountKey={account_key};EndpointSuffix={endpoint_suffix}"
    )


class Resolver(ABC):
    """Turns a (resource, operation) pair into a value."""

    @abstractmethod
    def resolve(self, handle: ResourceHandle, operation: ResolveOp) -> Any:
        """Resolve a single computed value.

        Args:
            handle: The source resource.
            operation: Which value to obtain from it.

        Returns:
            The resolved value; its form depends on the resolver.
        """
        pass
