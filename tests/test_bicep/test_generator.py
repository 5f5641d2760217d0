"""Tests for Bicep generator."""
import json
import pytest
from pathlib import Path
from botinfra.bicep.generator import BicepGenerator, resources_deployment_name
from botinfra.errors import ManifestError, ParameterValidationError


def test_generator(write_manifest, tmp_path):
    """Test Bicep file generation."""
    manifest_path = write_manifest(revision=3, sku="B3")
    out_dir = tmp_path / "out"

    generator = BicepGenerator(str(manifest_path), str(out_dir))
    bicep_path, params_path = generator.generate()

    # Verify files were created
    assert Path(bicep_path).exists()
    assert Path(params_path).exists()
    assert generator.paths["resources"].exists()

    main_content = Path(bicep_path).read_text()
    assert "targetScope = 'subscription'" in main_content
    assert "module resources './resources.bicep'" in main_content
    assert "name: 'chatbot-1.0-resources'" in main_content
    assert "output botMessagingEndpoint string = resources.outputs.botMessagingEndpoint" in main_content

    params = json.loads(Path(params_path).read_text())["parameters"]
    assert params["location"]["value"] == "swedencentral"
    assert params["appServiceSku"]["value"] == "B3"
    assert params["resourceGroupName"]["value"] == "rg-chatbot"
    assert params["tags"]["value"] == {"project": "chatbot"}


def test_resources_template_content(write_manifest):
    generator = BicepGenerator(str(write_manifest(revision=3, sku="B3")))
    content = generator.render_resources()

    assert "@allowed([\n  'B3'\n  'P0v3'\n  'P1v3'\n])\nparam appServiceSku string" in content
    assert "var appServiceTier = appServiceSku == 'B3' ? 'Basic' : 'PremiumV3'" in content
    assert "resource openai_gpt4o 'Microsoft.CognitiveServices/accounts/deployments@" in content
    assert "parent: openai" in content
    assert "search.listAdminKeys().primaryKey" in content
    assert "endpoint: 'https://${webApp.name}.azurewebsites.net/api/messages'" in content
    assert "tier: appServiceTier" in content
    # Secret values never appear as literals
    assert "AccountKey=${storage.listKeys().keys[0].value}" in content


def test_resources_follow_dependency_order(write_manifest):
    generator = BicepGenerator(str(write_manifest()))
    content = generator.render_resources()

    assert content.index("resource appServicePlan ") < content.index("resource webApp ")
    assert content.index("resource openai_gpt4o ") < content.index("resource webApp ")
    assert content.index("resource webApp ") < content.index("resource bot ")


def test_vault_mode_template(write_manifest):
    generator = BicepGenerator(str(write_manifest(secret_mode="vault")))
    content = generator.render_resources()

    assert "resource secret_AZURE_SEARCH_KEY 'Microsoft.KeyVault/vaults/secrets@" in content
    assert "value: '@Microsoft.KeyVault(SecretUri=${secret_AZURE_SEARCH_KEY.properties.secretUri})'" in content
    assert "scope: keyVault" in content
    assert "principalId: webApp.identity.principalId" in content


def test_generation_is_idempotent(write_manifest, tmp_path):
    manifest_path = write_manifest()
    first = BicepGenerator(str(manifest_path), str(tmp_path / "a"))
    second = BicepGenerator(str(manifest_path), str(tmp_path / "b"))
    first.generate()
    second.generate()

    for key in ("main", "resources", "parameters"):
        assert first.paths[key].read_text() == second.paths[key].read_text()


def test_existing_files(write_manifest, tmp_path):
    generator = BicepGenerator(str(write_manifest()), str(tmp_path / "out"))
    assert generator.existing_files() == []
    generator.generate()
    assert len(generator.existing_files()) == 3


def test_invalid_sku_writes_nothing(write_manifest, tmp_path):
    manifest_path = write_manifest(revision=1, sku="P1v3")
    with pytest.raises(ParameterValidationError):
        BicepGenerator(str(manifest_path), str(tmp_path / "out"))
    assert not (tmp_path / "out").exists()


def test_invalid_manifest(write_manifest):
    manifest_path = write_manifest(text="metadata:\n  name: test\n")
    with pytest.raises(ManifestError):
        BicepGenerator(str(manifest_path))


def test_resources_deployment_name(write_manifest):
    generator = BicepGenerator(str(write_manifest()))
    assert resources_deployment_name(generator.manifest) == "chatbot-1.0-resources"
