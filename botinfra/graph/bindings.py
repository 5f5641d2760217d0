"""Computed bindings injected into the web application's environment.

Each binding names a setting, the resource that supplies its value and the
operation used to read it. How the value reaches the application depends on
the secret mode:

* ``direct`` - the resolved value is written straight into the app setting.
* ``vault`` - secret values are written to Key Vault secrets and the app
  setting holds a Key Vault reference; the app's identity is granted read
  access to the vault.

Grounding settings are always Key Vault references to secrets that are
populated outside this deployment.
"""
from dataclasses import dataclass
from typing import Any, List, Tuple

from ..resolve.operations import ResolveOp
from . import kinds, symbols
from .config import StackConfig
from .models import Concat, Ref, ResourceDeclaration


@dataclass(frozen=True)
class ComputedBinding:
    """A setting whose value is only known after its source is provisioned."""
    setting: str
    source: str
    operation: ResolveOp
    secret: bool = True

    def ref(self) -> Ref:
        return Ref(self.source, self.operation)


def computed_bindings(config: StackConfig) -> List[ComputedBinding]:
    """All bindings for the configured stack, in setting order."""
    bindings = [
        ComputedBinding("AZURE_OPENAI_ENDPOINT", symbols.OPENAI, ResolveOp.ENDPOINT, secret=False),
        ComputedBinding("AZURE_OPENAI_API_KEY", symbols.OPENAI, ResolveOp.PRIMARY_KEY),
    ]
    for deployment in config.model_deployments:
        token = symbols.setting_token(deployment.name)
        bindings.append(ComputedBinding(
            f"AZURE_OPENAI_{token}_ENDPOINT", symbols.OPENAI, ResolveOp.ENDPOINT, secret=False
        ))
        bindings.append(ComputedBinding(
            f"AZURE_OPENAI_{token}_DEPLOYMENT",
            symbols.deployment_symbol(deployment.name),
            ResolveOp.NAME,
            secret=False,
        ))
    bindings.extend([
        ComputedBinding("AZURE_SEARCH_ENDPOINT", symbols.SEARCH, ResolveOp.ENDPOINT, secret=False),
        ComputedBinding("AZURE_SEARCH_KEY", symbols.SEARCH, ResolveOp.PRIMARY_KEY),
        ComputedBinding("COSMOS_CONNECTION_STRING", symbols.COSMOS, ResolveOp.CONNECTION_STRING),
        ComputedBinding("AZURE_STORAGE_CONNECTION_STRING", symbols.STORAGE, ResolveOp.CONNECTION_STRING),
        ComputedBinding("AZURE_SPEECH_KEY", symbols.SPEECH, ResolveOp.PRIMARY_KEY),
    ])
    return bindings


def secret_name(setting: str) -> str:
    """Key Vault secret name for a setting (vault names allow only alphanumerics and dashes)."""
    return setting.lower().replace("_", "-")


def key_vault_reference(secret_symbol: str) -> Concat:
    return Concat(("@Microsoft.KeyVault(SecretUri=", Ref(secret_symbol, ResolveOp.SECRET_URI), ")"))


def named_key_vault_reference(secret: str) -> Concat:
    return Concat((
        "@Microsoft.KeyVault(VaultName=",
        Ref(symbols.KEY_VAULT, ResolveOp.NAME),
        f";SecretName={secret})",
    ))


def app_settings(config: StackConfig) -> Tuple[List[Tuple[str, Any]], List[ResourceDeclaration]]:
    """Build the web application's settings.

    Returns:
        Tuple of (ordered (name, value) pairs, vault secret declarations the
        settings refer to).
    """
    settings: List[Tuple[str, Any]] = []
    secrets: List[ResourceDeclaration] = []

    for binding in computed_bindings(config):
        if binding.secret and config.vault_backed:
            secret = ResourceDeclaration(
                symbol=symbols.secret_symbol(binding.setting),
                type=kinds.KEY_VAULT_SECRET,
                name=secret_name(binding.setting),
                parent=symbols.KEY_VAULT,
                properties={"value": binding.ref()},
            )
            secrets.append(secret)
            settings.append((binding.setting, key_vault_reference(secret.symbol)))
        else:
            settings.append((binding.setting, binding.ref()))

    settings.append(("AZURE_SPEECH_REGION", config.parameters.location_ref()))

    if config.grounding:
        settings.append(("BING_GROUNDING_ENDPOINT", named_key_vault_reference(config.grounding.endpoint_secret)))
        settings.append(("BING_GROUNDING_KEY", named_key_vault_reference(config.grounding.key_secret)))

    settings.append(("SCM_DO_BUILD_DURING_DEPLOYMENT", "true"))
    return settings, secrets
