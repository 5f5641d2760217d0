"""Tests for quota checker."""
import json
import pytest
import yaml
from unittest.mock import MagicMock
from azure.core.exceptions import HttpResponseError
from botinfra.graph.models import ModelDeployment
from botinfra.quota.checker import QuotaChecker
from botinfra.quota.models import CapacityQuota, RegionAnalysis, RegionQuota
from botinfra.quota.providers import CognitiveServicesQuotaAdapter, capacity_requirements


def usage(name, current, limit):
    entry = MagicMock(current_value=current, limit=limit)
    entry.name.value = name
    return entry


@pytest.fixture
def adapter():
    """Adapter whose usage API has room in swedencentral only."""
    adapter = CognitiveServicesQuotaAdapter("sub-id", credential=MagicMock())
    client = MagicMock()
    regional = {
        "swedencentral": [usage("OpenAI.Standard.gpt-4o", 50, 450)],
        "eastus2": [usage("OpenAI.Standard.gpt-4o", 445, 450)],
        "westus": [],
    }
    client.usages.list.side_effect = lambda location: regional[location]
    adapter._client = client
    return adapter


def test_capacity_requirements():
    deployments = [
        ModelDeployment("a", "gpt-4o", capacity=30),
        ModelDeployment("b", "gpt-4o", capacity=20),
        ModelDeployment("c", "text-embedding-3-large"),
    ]
    assert capacity_requirements(deployments) == {
        "OpenAI.Standard.gpt-4o": 50,
        "OpenAI.Standard.text-embedding-3-large": 10,
    }


def test_quota_checker(write_manifest, adapter):
    """Test quota checking with mock data."""
    checker = QuotaChecker(str(write_manifest()), adapter=adapter)
    analysis = checker.check_quotas(["swedencentral", "eastus2", "westus"])

    assert analysis.viable_regions == ["swedencentral"]
    assert analysis.regions["eastus2"].shortfalls()[0].available == 5
    # A region without the counter has no capacity for the model
    assert analysis.regions["westus"].quotas["OpenAI.Standard.gpt-4o"].limit == 0


def test_candidate_regions_default_to_location(write_manifest, adapter):
    checker = QuotaChecker(str(write_manifest()), adapter=adapter)
    assert checker.candidate_regions() == ["swedencentral"]
    assert checker.candidate_regions(["eastus2"]) == ["eastus2"]


def test_lookup_failure_marks_region_not_viable(write_manifest, adapter):
    adapter.client.usages.list.side_effect = HttpResponseError(message="throttled")
    checker = QuotaChecker(str(write_manifest()), adapter=adapter)
    analysis = checker.check_quotas()

    region = analysis.regions["swedencentral"]
    assert region.error == "throttled"
    assert not region.is_sufficient()
    assert analysis.viable_regions == []


def test_select_region_prefers_current_location(write_manifest, adapter):
    checker = QuotaChecker(str(write_manifest()), adapter=adapter)
    analysis = RegionAnalysis({
        "eastus2": RegionQuota("eastus2"),
        "swedencentral": RegionQuota("swedencentral"),
    })
    assert checker.select_region(analysis) == "swedencentral"

    analysis = RegionAnalysis({"eastus2": RegionQuota("eastus2")})
    assert checker.select_region(analysis) == "eastus2"

    with pytest.raises(ValueError):
        checker.select_region(RegionAnalysis({}))


def test_update_manifest_location(write_manifest, adapter):
    path = write_manifest()
    QuotaChecker(str(path), dry_run=True, adapter=adapter).update_manifest_location("eastus2")
    assert yaml.safe_load(path.read_text())["parameters"]["location"] == "swedencentral"

    QuotaChecker(str(path), adapter=adapter).update_manifest_location("eastus2")
    assert yaml.safe_load(path.read_text())["parameters"]["location"] == "eastus2"


def test_analysis_save(tmp_path):
    region = RegionQuota("swedencentral", {"OpenAI.Standard.gpt-4o": CapacityQuota("OpenAI.Standard.gpt-4o", 10, 100, 30)})
    output = tmp_path / "analysis.json"
    RegionAnalysis({"swedencentral": region}).save(str(output))

    data = json.loads(output.read_text())
    assert data["viable_regions"] == ["swedencentral"]
    assert data["regions"]["swedencentral"]["quotas"]["OpenAI.Standard.gpt-4o"]["available"] == 90
