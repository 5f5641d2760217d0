"""Immutable configuration handed to the graph builder."""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .models import ModelDeployment
from .parameters import ParameterSet

SECRET_MODE_DIRECT = "direct"
SECRET_MODE_VAULT = "vault"


@dataclass(frozen=True)
class StackNames:
    """Fixed resource names. Changing one after the first deployment creates a new resource."""
    key_vault: str
    storage: str
    cosmos: str
    search: str
    speech: str
    openai: str
    app_service_plan: str
    web_app: str
    bot: str
    slot: str = "staging"


@dataclass(frozen=True)
class GroundingSecrets:
    """Names of pre-populated vault secrets holding the grounding endpoint and key."""
    endpoint_secret: str = "bing-grounding-endpoint"
    key_secret: str = "bing-grounding-key"


@dataclass(frozen=True)
class StackConfig:
    names: StackNames
    parameters: ParameterSet
    model_deployments: Tuple[ModelDeployment, ...] = ()
    secret_mode: str = SECRET_MODE_DIRECT
    grounding: Optional[GroundingSecrets] = None
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def vault_backed(self) -> bool:
        return self.secret_mode == SECRET_MODE_VAULT

    @property
    def reads_vault(self) -> bool:
        """True when any app setting is a Key Vault reference."""
        return self.vault_backed or self.grounding is not None
