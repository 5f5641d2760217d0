"""Template revisions and parameter validation."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..errors import ParameterValidationError
from .models import Lookup, Parameter, ParamRef

DEFAULT_LOCATION = "swedencentral"

# Every allowed token not listed here maps to DEFAULT_TIER
SKU_TIERS: Dict[str, str] = {"B3": "Basic"}
DEFAULT_TIER = "PremiumV3"
PLAN_CAPACITY = 1


@dataclass(frozen=True)
class TemplateRevision:
    """Differences between the published revisions of the template."""
    number: int
    allowed_skus: Tuple[str, ...]
    default_sku: str
    grounding_via_vault: bool


REVISIONS: Dict[int, TemplateRevision] = {
    1: TemplateRevision(1, ("B3", "P0v3"), "B3", grounding_via_vault=False),
    2: TemplateRevision(2, ("B3", "P0v3"), "B3", grounding_via_vault=False),
    3: TemplateRevision(3, ("B3", "P0v3", "P1v3"), "P0v3", grounding_via_vault=True),
}
LATEST_REVISION = 3


def get_revision(number: int) -> TemplateRevision:
    try:
        return REVISIONS[number]
    except KeyError:
        allowed = ", ".join(str(n) for n in sorted(REVISIONS))
        raise ParameterValidationError(f"unknown template revision {number} (known: {allowed})") from None


def tier_for_sku(sku: str) -> str:
    """Map an App Service SKU token to its pricing tier."""
    return SKU_TIERS.get(sku, DEFAULT_TIER)


@dataclass(frozen=True)
class ParameterSet:
    """Validated provisioning parameters."""
    location: str
    app_service_sku: str
    revision: TemplateRevision

    @classmethod
    def resolve(cls, revision: int = LATEST_REVISION, location: Optional[str] = None,
                app_service_sku: Optional[str] = None) -> "ParameterSet":
        """Apply revision defaults and validate supplied values.

        Raises:
            ParameterValidationError: If a value is outside its allowed set.
        """
        template = get_revision(revision)
        params = cls(
            location=location or DEFAULT_LOCATION,
            app_service_sku=app_service_sku or template.default_sku,
            revision=template,
        )
        for definition in params.definitions():
            definition.validate(params.value_of(definition.name))
        return params

    @property
    def app_service_tier(self) -> str:
        return tier_for_sku(self.app_service_sku)

    def value_of(self, name: str):
        return {"location": self.location, "appServiceSku": self.app_service_sku}[name]

    def definitions(self) -> List[Parameter]:
        return [
            Parameter(
                name="location",
                default=self.location,
                description="Azure region for all regional resources",
            ),
            Parameter(
                name="appServiceSku",
                default=self.app_service_sku,
                allowed_values=list(self.revision.allowed_skus),
                description="App Service plan size",
            ),
        ]

    def location_ref(self) -> ParamRef:
        return ParamRef("location", self.location)

    def sku_ref(self) -> ParamRef:
        return ParamRef("appServiceSku", self.app_service_sku)

    def tier_lookup(self) -> Lookup:
        mapping = tuple(
            (sku, tier) for sku, tier in SKU_TIERS.items() if sku in self.revision.allowed_skus
        )
        return Lookup(self.sku_ref(), mapping, DEFAULT_TIER)

    def tier_ref(self) -> ParamRef:
        return ParamRef("appServiceTier", self.app_service_tier)
