"""Model-capacity quota pre-flight."""
import logging
from typing import List, Optional

from .models import RegionAnalysis
from .providers import CognitiveServicesQuotaAdapter, capacity_requirements
from ..deploy.deployer import default_subscription
from ..manifest.parser import ManifestParser
from ..manifest.updater import ManifestUpdater

logger = logging.getLogger(__name__)


class QuotaChecker:
    """Checks that candidate regions can host every model deployment."""

    def __init__(self, manifest_path: str, dry_run: bool = False,
                 adapter: Optional[CognitiveServicesQuotaAdapter] = None):
        """Initialize the checker.

        Args:
            manifest_path: Path to the YAML manifest file.
            dry_run: If True, don't write the selected region back to the manifest.
            adapter: Quota adapter; one for the manifest's subscription is created when omitted.
        """
        self.manifest_path = manifest_path
        self.manifest = ManifestParser.load(manifest_path)
        self.stack = self.manifest.to_stack_config()
        self.dry_run = dry_run
        if adapter is None:
            subscription_id = self.manifest.subscription or default_subscription()
            adapter = CognitiveServicesQuotaAdapter(subscription_id)
        self.adapter = adapter

    def candidate_regions(self, regions: Optional[List[str]] = None) -> List[str]:
        if regions:
            return list(regions)
        if self.manifest.allowed_regions:
            return list(self.manifest.allowed_regions)
        return [self.stack.parameters.location]

    def check_quotas(self, regions: Optional[List[str]] = None) -> RegionAnalysis:
        """Check model capacity in each candidate region.

        Args:
            regions: Regions to check; defaults to allowedRegions, then the configured location.

        Returns:
            RegionAnalysis: Per-region results.
        """
        requirements = capacity_requirements(self.stack.model_deployments)
        results = {}
        for region in self.candidate_regions(regions):
            results[region] = self.adapter.check_quota(region, requirements)
            logger.debug("%s sufficient: %s", region, results[region].is_sufficient())
        return RegionAnalysis(results)

    def select_region(self, analysis: RegionAnalysis) -> str:
        """Keep the configured location when viable, else take the first viable region.

        Raises:
            ValueError: If no viable regions are found.
        """
        viable = analysis.viable_regions
        if not viable:
            raise ValueError("No viable regions found that satisfy quota requirements")
        if self.stack.parameters.location in viable:
            return self.stack.parameters.location
        return viable[0]

    def update_manifest_location(self, region: str) -> None:
        if self.dry_run:
            logger.info("Dry run: not writing location %s", region)
            return
        ManifestUpdater.update_location(self.manifest_path, region)
