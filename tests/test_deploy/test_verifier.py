"""Tests for post-deployment binding verification."""
import pytest
from unittest.mock import MagicMock
from azure.core.exceptions import ResourceNotFoundError

from botinfra.deploy.verifier import BindingVerifier
from botinfra.errors import DependencyResolutionError
from botinfra.graph.builder import GraphBuilder
from botinfra.resolve.live import LiveResolver

STORAGE_CONNECTION = (
    "DefaultEndpointsProtocol=https;AccountName=stchatbot;"
    "AccountKey=storage-key;EndpointSuffix=core.windows.net"
)


def live_resolver():
    resolver = LiveResolver("sub-id", "rg-chatbot", credential=MagicMock())
    clients = {key: MagicMock() for key in ("storage", "cosmos", "search", "cognitive", "web", "keyvault", "bot")}
    resolver._clients.update(clients)

    clients["cognitive"].accounts.get.return_value.properties.endpoint = "https://oai-chatbot.openai.azure.com/"
    clients["cognitive"].accounts.list_keys.return_value.key1 = "oai-key"
    clients["search"].admin_keys.get.return_value.primary_key = "search-key"
    clients["cosmos"].database_accounts.list_connection_strings.return_value.connection_strings = [
        MagicMock(connection_string="AccountEndpoint=https://cosmos-chatbot/;AccountKey=cosmos-key;")
    ]
    clients["storage"].storage_accounts.list_keys.return_value.keys = [MagicMock(value="storage-key")]
    clients["storage"].storage_accounts.get_properties.return_value.primary_endpoints.blob = (
        "https://stchatbot.blob.core.windows.net/"
    )
    clients["bot"].bots.get.return_value.properties.endpoint = "https://app-chatbot.azurewebsites.net/api/messages"
    return resolver


def deployed_settings(**overrides):
    settings = {
        "AZURE_OPENAI_ENDPOINT": "https://oai-chatbot.openai.azure.com/",
        "AZURE_OPENAI_API_KEY": "oai-key",
        "AZURE_OPENAI_GPT4O_ENDPOINT": "https://oai-chatbot.openai.azure.com/",
        "AZURE_OPENAI_GPT4O_DEPLOYMENT": "gpt4o",
        "AZURE_SEARCH_ENDPOINT": "https://srch-chatbot.search.windows.net",
        "AZURE_SEARCH_KEY": "search-key",
        "COSMOS_CONNECTION_STRING": "AccountEndpoint=https://cosmos-chatbot/;AccountKey=cosmos-key;",
        "AZURE_STORAGE_CONNECTION_STRING": STORAGE_CONNECTION,
        "AZURE_SPEECH_KEY": "speech-key",
        "AZURE_SPEECH_REGION": "swedencentral",
    }
    settings.update(overrides)
    return settings


def verify(config, settings, resolver=None):
    resolver = resolver or live_resolver()
    resolver._clients["web"].web_apps.list_application_settings.return_value.properties = settings
    graph = GraphBuilder(config).build()
    return {r.name: r for r in BindingVerifier(config, graph, resolver).verify()}


@pytest.fixture
def speech_resolver():
    resolver = live_resolver()
    resolver._clients["cognitive"].accounts.list_keys.side_effect = lambda rg, name: MagicMock(
        key1="speech-key" if name == "speech-chatbot" else "oai-key"
    )
    return resolver


def test_all_bindings_match(make_config, speech_resolver):
    results = verify(make_config(), deployed_settings(), speech_resolver)

    assert all(r.ok for r in results.values()), [r for r in results.values() if not r.ok]
    assert "bot.endpoint" in results


def test_stale_secret_reported_without_value(make_config, speech_resolver):
    results = verify(make_config(), deployed_settings(AZURE_SEARCH_KEY="rotated-away"), speech_resolver)

    result = results["AZURE_SEARCH_KEY"]
    assert not result.ok
    assert "rotated-away" not in result.detail
    assert "search-key" not in result.detail


def test_missing_setting(make_config, speech_resolver):
    settings = deployed_settings()
    del settings["AZURE_OPENAI_GPT4O_DEPLOYMENT"]
    results = verify(make_config(), settings, speech_resolver)

    assert not results["AZURE_OPENAI_GPT4O_DEPLOYMENT"].ok
    assert results["AZURE_OPENAI_GPT4O_DEPLOYMENT"].detail == "setting is missing"


def test_vault_mode_expects_references(make_config, speech_resolver):
    reference = "@Microsoft.KeyVault(SecretUri=https://kv-chatbot.vault.azure.net/secrets/azure-search-key/)"
    settings = deployed_settings(AZURE_SEARCH_KEY=reference)
    results = verify(make_config(secret_mode="vault"), settings, speech_resolver)

    assert results["AZURE_SEARCH_KEY"].ok
    # A plain value in vault mode means the secret bypassed the vault
    assert not results["AZURE_OPENAI_API_KEY"].ok
    assert results["AZURE_OPENAI_ENDPOINT"].ok


def test_wrong_bot_endpoint(make_config, speech_resolver):
    speech_resolver._clients["bot"].bots.get.return_value.properties.endpoint = "https://elsewhere/api/messages"
    results = verify(make_config(), deployed_settings(), speech_resolver)
    assert not results["bot.endpoint"].ok


def test_missing_web_app_is_a_resolution_error(make_config, speech_resolver):
    web_apps = speech_resolver._clients["web"].web_apps
    web_apps.list_application_settings.side_effect = ResourceNotFoundError("not found")
    config = make_config()
    verifier = BindingVerifier(config, GraphBuilder(config).build(), speech_resolver)

    with pytest.raises(DependencyResolutionError) as excinfo:
        verifier.verify()
    assert excinfo.value.resource == "webApp"
