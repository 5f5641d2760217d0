"""Data models for model-capacity quota checks."""
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CapacityQuota:
    """One usage counter, e.g. ``OpenAI.Standard.gpt-4o`` in thousands of tokens per minute."""
    usage_name: str
    current_usage: float
    limit: float
    required: float

    @property
    def available(self) -> float:
        return self.limit - self.current_usage

    @property
    def is_sufficient(self) -> bool:
        return self.available >= self.required


@dataclass
class RegionQuota:
    """Every counter checked in one region."""
    region: str
    quotas: Dict[str, CapacityQuota] = field(default_factory=dict)
    error: Optional[str] = None

    def is_sufficient(self) -> bool:
        """A region that could not be checked is never sufficient."""
        return self.error is None and all(q.is_sufficient for q in self.quotas.values())

    def shortfalls(self) -> List[CapacityQuota]:
        return [q for q in self.quotas.values() if not q.is_sufficient]


@dataclass
class RegionAnalysis:
    """Quota availability across candidate regions."""
    regions: Dict[str, RegionQuota]

    @property
    def viable_regions(self) -> List[str]:
        return [name for name, region in self.regions.items() if region.is_sufficient()]

    def to_dict(self) -> Dict:
        return {
            "viable_regions": self.viable_regions,
            "regions": {
                name: {
                    "error": region.error,
                    "quotas": {
                        usage: {
                            "current": q.current_usage,
                            "limit": q.limit,
                            "required": q.required,
                            "available": q.available,
                            "sufficient": q.is_sufficient,
                        } for usage, q in region.quotas.items()
                    },
                } for name, region in self.regions.items()
            },
        }

    def save(self, output_path: str) -> None:
        """Save the analysis as JSON.

        Args:
            output_path: Path to write the JSON file.
        """
        with open(output_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
