"""Builders for the speech and generative-AI accounts."""
from typing import List

from .. import kinds, symbols
from ..config import StackConfig
from ..models import ModelDeployment, ResourceDeclaration


class SpeechBuilder:
    """Declares the speech service account."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        return [ResourceDeclaration(
            symbol=symbols.SPEECH,
            type=kinds.COGNITIVE_ACCOUNT,
            name=config.names.speech,
            location=config.parameters.location_ref(),
            kind="SpeechServices",
            sku={"name": "S0"},
            properties={"customSubDomainName": config.names.speech},
            tags=dict(config.tags),
        )]


class OpenAIBuilder:
    """Declares the generative-AI account and one child resource per model deployment."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        account = ResourceDeclaration(
            symbol=symbols.OPENAI,
            type=kinds.COGNITIVE_ACCOUNT,
            name=config.names.openai,
            location=config.parameters.location_ref(),
            kind="OpenAI",
            sku={"name": "S0"},
            properties={
                "customSubDomainName": config.names.openai,
                "publicNetworkAccess": "Enabled",
            },
            tags=dict(config.tags),
        )
        declarations = [account]

        # The service rejects concurrent deployment writes on one account,
        # so each deployment waits for the previous one.
        previous = None
        for deployment in config.model_deployments:
            declaration = self._build_deployment(deployment)
            if previous:
                declaration.depends_on.append(previous)
            declarations.append(declaration)
            previous = declaration.symbol

        return declarations

    def _build_deployment(self, deployment: ModelDeployment) -> ResourceDeclaration:
        return ResourceDeclaration(
            symbol=symbols.deployment_symbol(deployment.name),
            type=kinds.COGNITIVE_DEPLOYMENT,
            name=deployment.name,
            parent=symbols.OPENAI,
            sku={"name": deployment.scale, "capacity": deployment.capacity},
            properties={
                "model": {
                    "format": deployment.format,
                    "name": deployment.model,
                    "version": deployment.version,
                },
            },
        )
