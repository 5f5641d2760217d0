"""Resolution into Bicep expressions evaluated by the engine during apply."""
from ..graph import kinds
from .operations import (
    HOSTING_DOMAIN,
    SEARCH_DOMAIN,
    ResolveOp,
    Resolver,
    ResourceHandle,
    ensure_supported,
)

# Operations whose expression differs by resource type
_TYPED_EXPRESSIONS = {
    (kinds.KEY_VAULT, ResolveOp.ENDPOINT): "{s}.properties.vaultUri",
    (kinds.COSMOS_ACCOUNT, ResolveOp.ENDPOINT): "{s}.properties.documentEndpoint",
    (kinds.COGNITIVE_ACCOUNT, ResolveOp.ENDPOINT): "{s}.properties.endpoint",
    (kinds.SEARCH_SERVICE, ResolveOp.ENDPOINT): "'https://${{{s}.name}}." + SEARCH_DOMAIN + "'",
    (kinds.STORAGE_ACCOUNT, ResolveOp.PRIMARY_KEY): "{s}.listKeys().keys[0].value",
    (kinds.COSMOS_ACCOUNT, ResolveOp.PRIMARY_KEY): "{s}.listKeys().primaryMasterKey",
    (kinds.SEARCH_SERVICE, ResolveOp.PRIMARY_KEY): "{s}.listAdminKeys().primaryKey",
    (kinds.COGNITIVE_ACCOUNT, ResolveOp.PRIMARY_KEY): "{s}.listKeys().key1",
    (kinds.STORAGE_ACCOUNT, ResolveOp.CONNECTION_STRING): (
        "'DefaultEndpointsProtocol=https;AccountName=${{{s}.name}};"
        "AccountKey=${{{s}.listKeys().keys[0].value}};"
        "EndpointSuffix=${{environment().suffixes.storage}}'"
    ),
    (kinds.COSMOS_ACCOUNT, ResolveOp.CONNECTION_STRING): (
        "{s}.listConnectionStrings().connectionStrings[0].connectionString"
    ),
    (kinds.WEB_SITE, ResolveOp.HOSTNAME): "'${{{s}.name}}." + HOSTING_DOMAIN + "'",
}

_COMMON_EXPRESSIONS = {
    ResolveOp.NAME: "{s}.name",
    ResolveOp.ID: "{s}.id",
    ResolveOp.PRINCIPAL_ID: "{s}.identity.principalId",
    ResolveOp.TENANT_ID: "{s}.identity.tenantId",
    ResolveOp.SECRET_URI: "{s}.properties.secretUri",
}


class BicepResolver(Resolver):
    """Resolves to Bicep expression text referencing the resource's symbol.

    Keys and connection strings become provider-side list* calls, so the
    secret value never exists in the generated files.
    """

    def resolve(self, handle: ResourceHandle, operation: ResolveOp) -> str:
        ensure_supported(handle, operation)
        template = _TYPED_EXPRESSIONS.get((handle.type, operation)) or _COMMON_EXPRESSIONS.get(operation)
        if template is None:
            raise NotImplementedError(f"no Bicep expression for {handle.type} {operation.value}")
        return template.format(s=handle.symbol)
