"""Post-deployment check that injected settings match their sources."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from azure.core.exceptions import HttpResponseError

from ..errors import DependencyResolutionError
from ..graph import symbols
from ..graph.bindings import computed_bindings
from ..graph.config import StackConfig
from ..graph.models import ResourceGraph
from ..resolve.live import LiveResolver
from ..resolve.operations import bot_messaging_endpoint

logger = logging.getLogger(__name__)

KEY_VAULT_REFERENCE_PREFIX = "@Microsoft.KeyVault("


@dataclass
class CheckResult:
    """Outcome of comparing one deployed value with its expected source."""
    name: str
    ok: bool
    detail: str = ""


class BindingVerifier:
    """Compares the deployed web app's settings with values resolved from their sources."""

    def __init__(self, config: StackConfig, graph: ResourceGraph, resolver: LiveResolver):
        self.config = config
        self.graph = graph
        self.resolver = resolver

    def _app_settings(self) -> Dict[str, Any]:
        web = self.resolver.client("web").web_apps
        try:
            result = web.list_application_settings(self.resolver.resource_group, self.config.names.web_app)
        except HttpResponseError as e:
            raise DependencyResolutionError(f"cannot read app settings: {e.message}", resource=symbols.WEB_APP) from e
        return dict(result.properties or {})

    def _bot_endpoint(self) -> Optional[str]:
        try:
            bot = self.resolver.client("bot").bots.get(self.resolver.resource_group, self.config.names.bot)
        except HttpResponseError as e:
            raise DependencyResolutionError(f"cannot read bot registration: {e.message}", resource=symbols.BOT) from e
        return bot.properties.endpoint

    def verify(self) -> List[CheckResult]:
        """Check every computed binding plus the bot's messaging endpoint.

        Returns:
            List[CheckResult]: One result per checked value. Secret values are never
            included in the detail text.
        """
        settings = self._app_settings()
        results = []
        for binding in computed_bindings(self.config):
            actual = settings.get(binding.setting)
            if actual is None:
                results.append(CheckResult(binding.setting, False, "setting is missing"))
                continue
            if binding.secret and self.config.vault_backed:
                ok = actual.startswith(KEY_VAULT_REFERENCE_PREFIX)
                results.append(CheckResult(binding.setting, ok, "" if ok else "not a Key Vault reference"))
                continue
            expected = self.resolver.resolve(self.graph.handle(binding.source), binding.operation)
            ok = actual == expected
            detail = ""
            if not ok:
                detail = "value differs from source" if binding.secret else f"expected {expected}, found {actual}"
            results.append(CheckResult(binding.setting, ok, detail))
            logger.debug("%s: %s", binding.setting, "ok" if ok else "mismatch")

        expected_endpoint = bot_messaging_endpoint(self.config.names.web_app)
        actual_endpoint = self._bot_endpoint()
        results.append(CheckResult(
            f"{symbols.BOT}.endpoint",
            actual_endpoint == expected_endpoint,
            "" if actual_endpoint == expected_endpoint else f"expected {expected_endpoint}, found {actual_endpoint}",
        ))
        return results
