"""Bot channel registration builder."""
from typing import List

from .. import kinds, symbols
from ..config import StackConfig
from ..models import Concat, Ref, ResourceDeclaration
from ...resolve.operations import BOT_MESSAGES_PATH, ResolveOp


def messaging_endpoint() -> Concat:
    """Bot callback URL on the web app's public hostname."""
    return Concat(("https://", Ref(symbols.WEB_APP, ResolveOp.HOSTNAME), BOT_MESSAGES_PATH))


class BotBuilder:
    """Declares the bot registration, using the web app's identity as the bot's application identity."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        return [ResourceDeclaration(
            symbol=symbols.BOT,
            type=kinds.BOT_SERVICE,
            name=config.names.bot,
            location="global",
            kind="azurebot",
            sku={"name": "F0"},
            properties={
                "displayName": config.names.bot,
                "endpoint": messaging_endpoint(),
                "msaAppId": Ref(symbols.WEB_APP, ResolveOp.PRINCIPAL_ID),
                "msaAppTenantId": Ref(symbols.WEB_APP, ResolveOp.TENANT_ID),
                "msaAppType": "SingleTenant",
            },
            tags=dict(config.tags),
        )]
