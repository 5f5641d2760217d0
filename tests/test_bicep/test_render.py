"""Tests for Bicep value rendering."""
from botinfra.bicep.render import BicepRenderer, quote
from botinfra.graph import kinds
from botinfra.graph.models import Call, Concat, Lookup, ParamRef, Ref, ResourceDeclaration, ResourceGraph
from botinfra.resolve.operations import ResolveOp


def renderer():
    graph = ResourceGraph()
    graph.add(
        ResourceDeclaration(symbol="search", type=kinds.SEARCH_SERVICE, name="srch-chatbot"),
        ResourceDeclaration(symbol="webApp", type=kinds.WEB_SITE, name="app-chatbot",
                            identity={"type": "SystemAssigned"}),
    )
    return BicepRenderer(graph)


def test_quote_escapes():
    assert quote("it's") == "'it\\'s'"
    assert quote("${x}") == "'\\${x}'"


def test_scalars():
    r = renderer()
    assert r.value(True) == "true"
    assert r.value(None) == "null"
    assert r.value(3) == "3"
    assert r.value("B3") == "'B3'"


def test_references():
    r = renderer()
    assert r.value(Ref("search", ResolveOp.PRIMARY_KEY)) == "search.listAdminKeys().primaryKey"
    assert r.value(Ref("webApp", ResolveOp.PRINCIPAL_ID)) == "webApp.identity.principalId"
    assert r.value(ParamRef("location", "swedencentral")) == "location"


def test_concat_inlines_string_expressions():
    r = renderer()
    value = Concat(("https://", Ref("webApp", ResolveOp.HOSTNAME), "/api/messages"))
    assert r.value(value) == "'https://${webApp.name}.azurewebsites.net/api/messages'"

    value = Concat(("id=", Ref("webApp", ResolveOp.ID)))
    assert r.value(value) == "'id=${webApp.id}'"


def test_call_and_lookup():
    r = renderer()
    assert r.value(Call("subscription", member="tenantId")) == "subscription().tenantId"
    assert r.value(Call("guid", (Ref("webApp", ResolveOp.ID), "x"))) == "guid(webApp.id, 'x')"

    lookup = Lookup(ParamRef("appServiceSku", "B3"), (("B3", "Basic"),), "PremiumV3")
    assert r.value(lookup) == "appServiceSku == 'B3' ? 'Basic' : 'PremiumV3'"


def test_nested_object():
    r = renderer()
    rendered = r.value({"siteConfig": {"appSettings": [{"name": "A", "value": "1"}]}, "hidden-link": "x"})
    assert rendered == (
        "{\n"
        "  siteConfig: {\n"
        "    appSettings: [\n"
        "      {\n"
        "        name: 'A'\n"
        "        value: '1'\n"
        "      }\n"
        "    ]\n"
        "  }\n"
        "  'hidden-link': 'x'\n"
        "}"
    )


def test_resource_header_and_field_order():
    r = renderer()
    deployment = ResourceDeclaration(
        symbol="child",
        type=kinds.COGNITIVE_DEPLOYMENT,
        name="gpt4o",
        parent="openai",
        sku={"name": "Standard", "capacity": 10},
        depends_on=["search"],
    )
    text = r.resource(deployment)
    assert text.startswith("resource child 'Microsoft.CognitiveServices/accounts/deployments@")
    assert text.index("parent: openai") < text.index("name: 'gpt4o'") < text.index("sku:") < text.index("dependsOn:")
