"""Resolution against deployed resources through the Azure management SDKs."""
import logging
from typing import Any, Optional
from urllib.parse import urlparse

from azure.core.exceptions import HttpResponseError
from azure.identity import DefaultAzureCredential

from ..errors import DependencyResolutionError
from ..graph import kinds
from .operations import (
    ResolveOp,
    Resolver,
    ResourceHandle,
    ensure_supported,
    search_endpoint,
    storage_connection_string,
)

logger = logging.getLogger(__name__)


class LiveResolver(Resolver):
    """Reads the same values the engine injects, from the provider's management APIs."""

    def __init__(self, subscription_id: str, resource_group: str, credential: Optional[Any] = None):
        """Initialize the resolver.

        Args:
            subscription_id: Azure subscription ID.
            resource_group: Resource group holding the stack.
            credential: Credential for the management clients; DefaultAzureCredential when omitted.
        """
        self.subscription_id = subscription_id
        self.resource_group = resource_group
        self.credential = credential or DefaultAzureCredential()
        self._clients = {}

    def resolve(self, handle: ResourceHandle, operation: ResolveOp) -> Any:
        ensure_supported(handle, operation)
        if handle.name is None:
            raise DependencyResolutionError("resource name is not a literal", resource=handle.symbol)
        logger.debug("Resolving %s of %s (%s)", operation.value, handle.name, handle.type)

        if operation == ResolveOp.NAME:
            return handle.name
        if operation == ResolveOp.ID:
            return self._resource_id(handle)

        method = getattr(self, f"_{operation.name.lower()}", None)
        if method is None:
            raise DependencyResolutionError(f"cannot resolve '{operation.value}' live", resource=handle.symbol)
        try:
            return method(handle)
        except HttpResponseError as e:
            raise DependencyResolutionError(
                f"reading '{operation.value}' of {handle.name} failed: {e.message}", resource=handle.symbol
            ) from e

    def client(self, key: str):
        if key in self._clients:
            return self._clients[key]
        if key == "storage":
            from azure.mgmt.storage import StorageManagementClient
            client = StorageManagementClient(self.credential, self.subscription_id)
        elif key == "cosmos":
            from azure.mgmt.cosmosdb import CosmosDBManagementClient
            client = CosmosDBManagementClient(self.credential, self.subscription_id)
        elif key == "search":
            from azure.mgmt.search import SearchManagementClient
            client = SearchManagementClient(self.credential, self.subscription_id)
        elif key == "cognitive":
            from azure.mgmt.cognitiveservices import CognitiveServicesManagementClient
            client = CognitiveServicesManagementClient(self.credential, self.subscription_id)
        elif key == "web":
            from azure.mgmt.web import WebSiteManagementClient
            client = WebSiteManagementClient(self.credential, self.subscription_id)
        elif key == "keyvault":
            from azure.mgmt.keyvault import KeyVaultManagementClient
            client = KeyVaultManagementClient(self.credential, self.subscription_id)
        elif key == "bot":
            from azure.mgmt.botservice import AzureBotService
            client = AzureBotService(self.credential, self.subscription_id)
        else:
            raise KeyError(key)
        self._clients[key] = client
        return client

    def _resource_id(self, handle: ResourceHandle) -> str:
        provider, _, types = handle.type.partition("/")
        segments = types.split("/")
        if len(segments) == 2 and handle.parent_name:
            path = f"{segments[0]}/{handle.parent_name}/{segments[1]}/{handle.name}"
        else:
            path = f"{segments[0]}/{handle.name}"
        return (
            f"/subscriptions/{self.subscription_id}/resourceGroups/{self.resource_group}"
            f"/providers/{provider}/{path}"
        )

    def _unsupported(self, handle: ResourceHandle, operation: ResolveOp):
        return DependencyResolutionError(
            f"cannot resolve '{operation.value}' live for {handle.type}", resource=handle.symbol
        )

    def _endpoint(self, handle: ResourceHandle) -> str:
        rg, name = self.resource_group, handle.name
        if handle.type == kinds.SEARCH_SERVICE:
            return search_endpoint(name)
        if handle.type == kinds.COGNITIVE_ACCOUNT:
            return self.client("cognitive").accounts.get(rg, name).properties.endpoint
        if handle.type == kinds.COSMOS_ACCOUNT:
            return self.client("cosmos").database_accounts.get(rg, name).document_endpoint
        if handle.type == kinds.KEY_VAULT:
            return self.client("keyvault").vaults.get(rg, name).properties.vault_uri
        raise self._unsupported(handle, ResolveOp.ENDPOINT)

    def _primary_key(self, handle: ResourceHandle) -> str:
        rg, name = self.resource_group, handle.name
        if handle.type == kinds.STORAGE_ACCOUNT:
            return self.client("storage").storage_accounts.list_keys(rg, name).keys[0].value
        if handle.type == kinds.COSMOS_ACCOUNT:
            return self.client("cosmos").database_accounts.list_keys(rg, name).primary_master_key
        if handle.type == kinds.SEARCH_SERVICE:
            return self.client("search").admin_keys.get(rg, name).primary_key
        if handle.type == kinds.COGNITIVE_ACCOUNT:
            return self.client("cognitive").accounts.list_keys(rg, name).key1
        raise self._unsupported(handle, ResolveOp.PRIMARY_KEY)

    def _connection_string(self, handle: ResourceHandle) -> str:
        rg, name = self.resource_group, handle.name
        if handle.type == kinds.STORAGE_ACCOUNT:
            return storage_connection_string(name, self._primary_key(handle), self._storage_suffix(handle))
        if handle.type == kinds.COSMOS_ACCOUNT:
            result = self.client("cosmos").database_accounts.list_connection_strings(rg, name)
            return result.connection_strings[0].connection_string
        raise self._unsupported(handle, ResolveOp.CONNECTION_STRING)

    def _storage_suffix(self, handle: ResourceHandle) -> str:
        """Cloud-specific suffix, e.g. core.windows.net, taken from the account's blob endpoint."""
        account = self.client("storage").storage_accounts.get_properties(self.resource_group, handle.name)
        host = urlparse(account.primary_endpoints.blob).netloc
        # <account>.blob.<suffix>
        return host.split(".", 2)[2]

    def _site(self, handle: ResourceHandle):
        web = self.client("web").web_apps
        if handle.type == kinds.WEB_SITE_SLOT:
            return web.get_slot(self.resource_group, handle.parent_name, handle.name)
        return web.get(self.resource_group, handle.name)

    def _principal_id(self, handle: ResourceHandle) -> str:
        return self._site(handle).identity.principal_id

    def _tenant_id(self, handle: ResourceHandle) -> str:
        return self._site(handle).identity.tenant_id

    def _hostname(self, handle: ResourceHandle) -> str:
        return self._site(handle).default_host_name

    def _secret_uri(self, handle: ResourceHandle) -> str:
        secret = self.client("keyvault").secrets.get(self.resource_group, handle.parent_name, handle.name)
        return secret.properties.secret_uri
