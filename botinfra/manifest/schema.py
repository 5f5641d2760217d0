"""Pydantic models for manifest validation."""
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..graph.config import GroundingSecrets, StackConfig, StackNames
from ..graph.models import ModelDeployment
from ..graph.parameters import LATEST_REVISION, ParameterSet


class Metadata(BaseModel):
    """Manifest metadata."""
    name: str
    description: Optional[str] = None
    version: str


class ResourceGroup(BaseModel):
    """Resource group configuration."""
    name: str


class Parameters(BaseModel):
    """Provisioning parameters; omitted values take the revision's defaults."""
    model_config = ConfigDict(populate_by_name=True)

    location: Optional[str] = None
    app_service_sku: Optional[str] = Field(default=None, alias='appServiceSku')


class Names(BaseModel):
    """Fixed resource names."""
    model_config = ConfigDict(populate_by_name=True)

    key_vault: str = Field(alias='keyVault')
    storage: str
    cosmos: str
    search: str
    speech: str
    openai: str
    app_service_plan: str = Field(alias='appServicePlan')
    web_app: str = Field(alias='webApp')
    bot: str
    slot: str = "staging"


class ModelDeploymentEntry(BaseModel):
    """One generative-AI model deployment."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    model: str = Field(alias='sku')
    version: Optional[str] = None
    scale: str = "Standard"
    capacity: int = Field(default=10, gt=0)


class Secrets(BaseModel):
    """How computed secrets reach the web application."""
    mode: Literal["direct", "vault"] = "direct"


class Grounding(BaseModel):
    """Grounding endpoint/key held in pre-populated vault secrets."""
    model_config = ConfigDict(populate_by_name=True)

    enabled: Optional[bool] = None
    endpoint_secret: str = Field(default="bing-grounding-endpoint", alias='endpointSecret')
    key_secret: str = Field(default="bing-grounding-key", alias='keySecret')


class Manifest(BaseModel):
    """Root manifest schema."""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    metadata: Metadata
    subscription: Optional[str] = None
    resource_group: ResourceGroup = Field(alias='resourceGroup')
    revision: int = LATEST_REVISION
    parameters: Parameters = Field(default_factory=Parameters)
    allowed_regions: List[str] = Field(default_factory=list, alias='allowedRegions')
    names: Names
    model_deployments: List[ModelDeploymentEntry] = Field(default_factory=list, alias='modelDeployments')
    secrets: Secrets = Field(default_factory=Secrets)
    grounding: Grounding = Field(default_factory=Grounding)
    tags: Dict[str, str] = Field(default_factory=dict)

    @property
    def deployment_name(self) -> str:
        return f"{self.metadata.name}-{self.metadata.version}"

    def to_stack_config(self) -> StackConfig:
        """Validate parameters and freeze the manifest into builder input.

        Raises:
            ParameterValidationError: If a parameter is outside its allowed set.
        """
        params = ParameterSet.resolve(
            revision=self.revision,
            location=self.parameters.location,
            app_service_sku=self.parameters.app_service_sku,
        )
        grounding_enabled = self.grounding.enabled
        if grounding_enabled is None:
            grounding_enabled = params.revision.grounding_via_vault
        grounding = None
        if grounding_enabled:
            grounding = GroundingSecrets(self.grounding.endpoint_secret, self.grounding.key_secret)

        return StackConfig(
            names=StackNames(**self.names.model_dump()),
            parameters=params,
            model_deployments=tuple(
                ModelDeployment(
                    name=entry.name,
                    model=entry.model,
                    version=entry.version,
                    scale=entry.scale,
                    capacity=entry.capacity,
                )
                for entry in self.model_deployments
            ),
            secret_mode=self.secrets.mode,
            grounding=grounding,
            tags=dict(self.tags),
        )
