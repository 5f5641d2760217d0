"""Shared fixtures."""
import textwrap

import pytest

from botinfra.graph.config import GroundingSecrets, StackConfig, StackNames
from botinfra.graph.models import ModelDeployment
from botinfra.graph.parameters import ParameterSet

MANIFEST_YAML = """
metadata:
  name: chatbot
  version: "1.0"
resourceGroup:
  name: rg-chatbot
revision: {revision}
parameters:
  location: swedencentral
  appServiceSku: {sku}
names:
  keyVault: kv-chatbot
  storage: stchatbot
  cosmos: cosmos-chatbot
  search: srch-chatbot
  speech: speech-chatbot
  openai: oai-chatbot
  appServicePlan: asp-chatbot
  webApp: app-chatbot
  bot: bot-chatbot
modelDeployments:
  - name: gpt4o
    sku: gpt-4o
    version: "2024-11-20"
secrets:
  mode: {secret_mode}
tags:
  project: chatbot
"""


@pytest.fixture
def write_manifest(tmp_path):
    """Write a manifest and return its path."""
    def _write(revision=3, sku="B3", secret_mode="direct", text=None):
        content = text if text is not None else MANIFEST_YAML.format(
            revision=revision, sku=sku, secret_mode=secret_mode
        )
        path = tmp_path / "infra.yaml"
        path.write_text(textwrap.dedent(content))
        return path
    return _write


@pytest.fixture
def stack_names():
    return StackNames(
        key_vault="kv-chatbot",
        storage="stchatbot",
        cosmos="cosmos-chatbot",
        search="srch-chatbot",
        speech="speech-chatbot",
        openai="oai-chatbot",
        app_service_plan="asp-chatbot",
        web_app="app-chatbot",
        bot="bot-chatbot",
    )


@pytest.fixture
def make_config(stack_names):
    """Build a StackConfig with test names."""
    def _make(revision=1, sku="B3", deployments=None, secret_mode="direct", grounding=False):
        if deployments is None:
            deployments = [ModelDeployment("gpt4o", "gpt-4o", "2024-11-20")]
        return StackConfig(
            names=stack_names,
            parameters=ParameterSet.resolve(revision=revision, location="swedencentral", app_service_sku=sku),
            model_deployments=tuple(deployments),
            secret_mode=secret_mode,
            grounding=GroundingSecrets() if grounding else None,
            tags={"project": "chatbot"},
        )
    return _make
