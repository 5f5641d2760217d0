"""Logical names of the declared resources."""
import re

KEY_VAULT = "keyVault"
STORAGE = "storage"
COSMOS = "cosmos"
SEARCH = "search"
SPEECH = "speech"
OPENAI = "openai"
PLAN = "appServicePlan"
WEB_APP = "webApp"
SLOT = "stagingSlot"
BOT = "bot"
VAULT_ACCESS = "webAppVaultAccess"
SLOT_VAULT_ACCESS = "stagingSlotVaultAccess"


def _identifier(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", value)


def deployment_symbol(deployment_name: str) -> str:
    return f"openai_{_identifier(deployment_name)}"


def secret_symbol(setting_name: str) -> str:
    return f"secret_{_identifier(setting_name)}"


def setting_token(deployment_name: str) -> str:
    """Upper-case token used in per-deployment setting names."""
    return _identifier(deployment_name).upper()
