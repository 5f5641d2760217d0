"""Azure resource types and the API versions they are declared with."""

KEY_VAULT = "Microsoft.KeyVault/vaults"
KEY_VAULT_SECRET = "Microsoft.KeyVault/vaults/secrets"
STORAGE_ACCOUNT = "Microsoft.Storage/storageAccounts"
COSMOS_ACCOUNT = "Microsoft.DocumentDB/databaseAccounts"
SEARCH_SERVICE = "Microsoft.Search/searchServices"
COGNITIVE_ACCOUNT = "Microsoft.CognitiveServices/accounts"
COGNITIVE_DEPLOYMENT = "Microsoft.CognitiveServices/accounts/deployments"
SERVER_FARM = "Microsoft.Web/serverfarms"
WEB_SITE = "Microsoft.Web/sites"
WEB_SITE_SLOT = "Microsoft.Web/sites/slots"
BOT_SERVICE = "Microsoft.BotService/botServices"
ROLE_ASSIGNMENT = "Microsoft.Authorization/roleAssignments"

API_VERSIONS = {
    KEY_VAULT: "2023-07-01",
    KEY_VAULT_SECRET: "2023-07-01",
    STORAGE_ACCOUNT: "2023-01-01",
    COSMOS_ACCOUNT: "2024-05-15",
    SEARCH_SERVICE: "2023-11-01",
    COGNITIVE_ACCOUNT: "2024-10-01",
    COGNITIVE_DEPLOYMENT: "2024-10-01",
    SERVER_FARM: "2023-12-01",
    WEB_SITE: "2023-12-01",
    WEB_SITE_SLOT: "2023-12-01",
    BOT_SERVICE: "2022-09-15",
    ROLE_ASSIGNMENT: "2022-04-01",
}

# Resource types that are created with a tags block
TAGGABLE = {
    KEY_VAULT,
    STORAGE_ACCOUNT,
    COSMOS_ACCOUNT,
    SEARCH_SERVICE,
    COGNITIVE_ACCOUNT,
    SERVER_FARM,
    WEB_SITE,
    WEB_SITE_SLOT,
    BOT_SERVICE,
}
