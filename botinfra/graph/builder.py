"""Builds the full resource graph for a stack configuration."""
import logging

from . import symbols
from .bindings import app_settings
from .builders.bot import BotBuilder, messaging_endpoint
from .builders.cognitive import OpenAIBuilder, SpeechBuilder
from .builders.data import CosmosBuilder, SearchBuilder, StorageBuilder
from .builders.vault import VaultBuilder
from .builders.web import WebBuilder
from .config import StackConfig
from .models import Ref, ResourceGraph
from ..resolve.operations import ResolveOp

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Turns a StackConfig into a validated ResourceGraph.

    The output depends only on the configuration, so building twice from the
    same configuration yields graphs with the same fingerprint.
    """

    def __init__(self, config: StackConfig):
        self.config = config
        self.vault_builder = VaultBuilder()
        self.leaf_builders = [
            StorageBuilder(),
            CosmosBuilder(),
            SearchBuilder(),
            SpeechBuilder(),
            OpenAIBuilder(),
        ]
        self.web_builder = WebBuilder()
        self.bot_builder = BotBuilder()

    def build(self) -> ResourceGraph:
        """Declare every resource and validate the result.

        Returns:
            ResourceGraph: The validated graph.

        Raises:
            NameConflictError: If two declarations share a name.
            DependencyResolutionError: If a binding cannot be satisfied or the graph has a cycle.
        """
        config = self.config
        graph = ResourceGraph(parameters=config.parameters.definitions())
        graph.variables["appServiceTier"] = config.parameters.tier_lookup()

        graph.add(*self.vault_builder.build(config))
        for builder in self.leaf_builders:
            declarations = builder.build(config)
            graph.add(*declarations)
            logger.debug("Declared %s", ", ".join(d.symbol for d in declarations))

        settings, secrets = app_settings(config)
        graph.add(*secrets)
        graph.add(*self.web_builder.build(config, settings))
        graph.add(*self.bot_builder.build(config))

        graph.outputs = {
            "webAppName": Ref(symbols.WEB_APP, ResolveOp.NAME),
            "webAppHostName": Ref(symbols.WEB_APP, ResolveOp.HOSTNAME),
            "webAppPrincipalId": Ref(symbols.WEB_APP, ResolveOp.PRINCIPAL_ID),
            "botMessagingEndpoint": messaging_endpoint(),
            "openaiEndpoint": Ref(symbols.OPENAI, ResolveOp.ENDPOINT),
            "searchEndpoint": Ref(symbols.SEARCH, ResolveOp.ENDPOINT),
            "keyVaultUri": Ref(symbols.KEY_VAULT, ResolveOp.ENDPOINT),
        }

        graph.validate()
        logger.debug("Graph has %d resources, fingerprint %s", len(graph.resources), graph.fingerprint())
        return graph
