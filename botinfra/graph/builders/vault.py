"""Secret store builder."""
from typing import List

from .. import kinds, symbols
from ..config import StackConfig
from ..models import Call, Ref, ResourceDeclaration
from ...resolve.operations import ResolveOp

KEY_VAULT_SECRETS_USER_ROLE = "4633458b-17de-408a-b874-0445c86b69e6"


class VaultBuilder:
    """Declares the Key Vault and, when any setting is a vault reference, read access for the app and its slot."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        vault = ResourceDeclaration(
            symbol=symbols.KEY_VAULT,
            type=kinds.KEY_VAULT,
            name=config.names.key_vault,
            location=config.parameters.location_ref(),
            properties={
                "tenantId": Call("subscription", member="tenantId"),
                "sku": {"family": "A", "name": "standard"},
                "enableRbacAuthorization": config.reads_vault,
                "enableSoftDelete": True,
                # Access policies are attached after creation when RBAC is off
                "accessPolicies": [],
            },
            tags=dict(config.tags),
        )
        if not config.reads_vault:
            return [vault]
        # The slot runs with the same settings under its own identity
        return [
            vault,
            self._build_access(symbols.VAULT_ACCESS, symbols.WEB_APP),
            self._build_access(symbols.SLOT_VAULT_ACCESS, symbols.SLOT),
        ]

    def _build_access(self, symbol: str, principal: str) -> ResourceDeclaration:
        role_id = Call(
            "subscriptionResourceId",
            ("Microsoft.Authorization/roleDefinitions", KEY_VAULT_SECRETS_USER_ROLE),
        )
        return ResourceDeclaration(
            symbol=symbol,
            type=kinds.ROLE_ASSIGNMENT,
            name=Call("guid", (
                Ref(symbols.KEY_VAULT, ResolveOp.ID),
                Ref(principal, ResolveOp.ID),
                KEY_VAULT_SECRETS_USER_ROLE,
            )),
            scope=symbols.KEY_VAULT,
            properties={
                "roleDefinitionId": role_id,
                "principalId": Ref(principal, ResolveOp.PRINCIPAL_ID),
                "principalType": "ServicePrincipal",
            },
        )
