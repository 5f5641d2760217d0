"""Builders for the hosting plan, web application and its staging slot."""
from typing import Any, List, Tuple

from .. import kinds, symbols
from ..config import StackConfig
from ..models import Ref, ResourceDeclaration
from ..parameters import PLAN_CAPACITY
from ...resolve.operations import ResolveOp

LINUX_RUNTIME = "PYTHON|3.11"
STARTUP_COMMAND = "python -m aiohttp.web -H 0.0.0.0 -P 8000 app:init_func"


class WebBuilder:
    """Declares the App Service plan, the web app and the staging slot."""

    def build(self, config: StackConfig, settings: List[Tuple[str, Any]]) -> List[ResourceDeclaration]:
        """Build the hosting resources.

        Args:
            config: Stack configuration.
            settings: Ordered (name, value) app settings, values may be computed.

        Returns:
            List[ResourceDeclaration]: Plan, web app and slot.
        """
        params = config.parameters
        plan = ResourceDeclaration(
            symbol=symbols.PLAN,
            type=kinds.SERVER_FARM,
            name=config.names.app_service_plan,
            location=params.location_ref(),
            kind="linux",
            sku={
                "name": params.sku_ref(),
                "tier": params.tier_ref(),
                "capacity": PLAN_CAPACITY,
            },
            properties={"reserved": True},
            tags=dict(config.tags),
        )

        web_app = ResourceDeclaration(
            symbol=symbols.WEB_APP,
            type=kinds.WEB_SITE,
            name=config.names.web_app,
            location=params.location_ref(),
            kind="app,linux",
            identity={"type": "SystemAssigned"},
            properties=self._site_properties(settings),
            tags=dict(config.tags),
        )

        slot = ResourceDeclaration(
            symbol=symbols.SLOT,
            type=kinds.WEB_SITE_SLOT,
            name=config.names.slot,
            location=params.location_ref(),
            kind="app,linux",
            identity={"type": "SystemAssigned"},
            parent=symbols.WEB_APP,
            properties=self._site_properties(settings),
            tags=dict(config.tags),
        )

        return [plan, web_app, slot]

    def _site_properties(self, settings: List[Tuple[str, Any]]) -> dict:
        return {
            "serverFarmId": Ref(symbols.PLAN, ResolveOp.ID),
            "httpsOnly": True,
            "siteConfig": {
                "linuxFxVersion": LINUX_RUNTIME,
                "appCommandLine": STARTUP_COMMAND,
                "alwaysOn": True,
                "ftpsState": "Disabled",
                "minTlsVersion": "1.2",
                "appSettings": [{"name": name, "value": value} for name, value in settings],
            },
        }
