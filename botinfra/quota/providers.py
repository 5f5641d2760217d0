"""Quota lookups against the Cognitive Services usage API."""
import logging
from typing import Any, Dict, Iterable, Optional

from azure.core.exceptions import HttpResponseError
from azure.identity import DefaultAzureCredential

from .models import CapacityQuota, RegionQuota
from ..graph.models import ModelDeployment

logger = logging.getLogger(__name__)


def usage_name(deployment: ModelDeployment) -> str:
    """Usage counter charged by a deployment, e.g. ``OpenAI.Standard.gpt-4o``."""
    return f"{deployment.format}.{deployment.scale}.{deployment.model}"


def capacity_requirements(deployments: Iterable[ModelDeployment]) -> Dict[str, float]:
    """Total capacity requested per usage counter."""
    required: Dict[str, float] = {}
    for deployment in deployments:
        key = usage_name(deployment)
        required[key] = required.get(key, 0) + deployment.capacity
    return required


class CognitiveServicesQuotaAdapter:
    """Reads model capacity usage for a region."""

    def __init__(self, subscription_id: str, credential: Optional[Any] = None):
        """Initialize the adapter.

        Args:
            subscription_id: Azure subscription ID.
            credential: Credential for the management client; DefaultAzureCredential when omitted.
        """
        self.subscription_id = subscription_id
        self.credential = credential or DefaultAzureCredential()
        self._client = None

    @property
    def client(self):
        if self._client is None:
            from azure.mgmt.cognitiveservices import CognitiveServicesManagementClient
            self._client = CognitiveServicesManagementClient(self.credential, self.subscription_id)
        return self._client

    def check_quota(self, region: str, requirements: Dict[str, float]) -> RegionQuota:
        """Compare required capacity with what is left in a region.

        Args:
            region: Azure region name.
            requirements: Required capacity keyed by usage counter name.

        Returns:
            RegionQuota: Counters for the region; a counter the region does not offer
            gets a zero limit, and a failed lookup is recorded as the region's error.
        """
        result = RegionQuota(region)
        try:
            usages = {u.name.value.lower(): u for u in self.client.usages.list(location=region)}
        except HttpResponseError as e:
            logger.warning("Quota lookup failed in %s: %s", region, e.message)
            result.error = e.message or str(e)
            return result

        for name, required in requirements.items():
            usage = usages.get(name.lower())
            if usage is None:
                logger.debug("No usage counter %s in %s", name, region)
                result.quotas[name] = CapacityQuota(name, current_usage=0, limit=0, required=required)
                continue
            result.quotas[name] = CapacityQuota(
                usage_name=name,
                current_usage=float(usage.current_value or 0),
                limit=float(usage.limit or 0),
                required=float(required),
            )
        return result
