"""Builders for the independent data-plane resources."""
from typing import List

from .. import kinds, symbols
from ..config import StackConfig
from ..models import ResourceDeclaration


class StorageBuilder:
    """Declares the blob storage account."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        return [ResourceDeclaration(
            symbol=symbols.STORAGE,
            type=kinds.STORAGE_ACCOUNT,
            name=config.names.storage,
            location=config.parameters.location_ref(),
            kind="StorageV2",
            sku={"name": "Standard_LRS"},
            properties={
                "accessTier": "Hot",
                "minimumTlsVersion": "TLS1_2",
                "supportsHttpsTrafficOnly": True,
                "allowBlobPublicAccess": False,
            },
            tags=dict(config.tags),
        )]


class CosmosBuilder:
    """Declares the document database account."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        location = config.parameters.location_ref()
        return [ResourceDeclaration(
            symbol=symbols.COSMOS,
            type=kinds.COSMOS_ACCOUNT,
            name=config.names.cosmos,
            location=location,
            kind="GlobalDocumentDB",
            properties={
                "databaseAccountOfferType": "Standard",
                "consistencyPolicy": {"defaultConsistencyLevel": "Session"},
                "locations": [
                    {"locationName": location, "failoverPriority": 0, "isZoneRedundant": False}
                ],
            },
            tags=dict(config.tags),
        )]


class SearchBuilder:
    """Declares the search service."""

    def build(self, config: StackConfig) -> List[ResourceDeclaration]:
        return [ResourceDeclaration(
            symbol=symbols.SEARCH,
            type=kinds.SEARCH_SERVICE,
            name=config.names.search,
            location=config.parameters.location_ref(),
            sku={"name": "basic"},
            properties={
                "replicaCount": 1,
                "partitionCount": 1,
                "hostingMode": "default",
            },
            tags=dict(config.tags),
        )]
