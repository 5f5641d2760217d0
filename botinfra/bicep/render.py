"""Rendering of property values as Bicep literals and expressions."""
import re
from dataclasses import dataclass
from typing import Any, Dict

from ..graph.models import Call, Concat, Lookup, ParamRef, Ref, ResourceDeclaration, ResourceGraph
from ..resolve.bicep import BicepResolver

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
INDENT = "  "


@dataclass(frozen=True)
class Identifier:
    """A bare symbol reference such as a parent or scope."""
    name: str


def _is_string_literal(expression: str) -> bool:
    """True for a single quoted string, possibly containing interpolations."""
    return (
        len(expression) >= 2
        and expression[0] == "'"
        and expression[-1] == "'"
        and "'" not in expression[1:-1].replace("\\'", "")
    )


def quote(text: str) -> str:
    """Quote a string as a Bicep literal."""
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace("${", "\\${")
    return f"'{escaped}'"


class BicepRenderer:
    """Renders graph values to Bicep source text."""

    def __init__(self, graph: ResourceGraph, resolver: BicepResolver = None):
        self.graph = graph
        self.resolver = resolver or BicepResolver()

    def expression(self, value: Any) -> str:
        """Render a value that appears inside an interpolation or as a function argument."""
        if isinstance(value, Ref):
            return self.resolver.resolve(self.graph.handle(value.source), value.operation)
        if isinstance(value, ParamRef):
            return value.name
        if isinstance(value, Call):
            args = ", ".join(self.expression(a) for a in value.args)
            text = f"{value.function}({args})"
            return f"{text}.{value.member}" if value.member else text
        if isinstance(value, Concat):
            return self.interpolate(value)
        if isinstance(value, Lookup):
            return self.lookup(value)
        if isinstance(value, Identifier):
            return value.name
        if isinstance(value, str):
            return quote(value)
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        return str(value)

    def interpolate(self, value: Concat) -> str:
        pieces = []
        for part in value.parts:
            if isinstance(part, str):
                pieces.append(quote(part)[1:-1])
            else:
                expression = self.expression(part)
                if _is_string_literal(expression):
                    pieces.append(expression[1:-1])
                else:
                    pieces.append("${" + expression + "}")
        return "'" + "".join(pieces) + "'"

    def lookup(self, value: Lookup) -> str:
        """Render a mapping as a chain of conditional expressions."""
        text = quote(value.default)
        for key, result in reversed(value.mapping):
            text = f"{value.key.name} == {quote(key)} ? {quote(result)} : {text}"
        return text

    def value(self, value: Any, depth: int = 0) -> str:
        """Render any property value, using multi-line objects and arrays."""
        pad = INDENT * (depth + 1)
        closing = INDENT * depth
        if isinstance(value, dict):
            if not value:
                return "{}"
            lines = ["{"]
            for key, item in value.items():
                rendered_key = key if _IDENTIFIER.match(key) else quote(key)
                lines.append(f"{pad}{rendered_key}: {self.value(item, depth + 1)}")
            lines.append(f"{closing}}}")
            return "\n".join(lines)
        if isinstance(value, (list, tuple)):
            if not value:
                return "[]"
            lines = ["["]
            for item in value:
                lines.append(f"{pad}{self.value(item, depth + 1)}")
            lines.append(f"{closing}]")
            return "\n".join(lines)
        return self.expression(value)

    def resource_body(self, resource: ResourceDeclaration) -> Dict[str, Any]:
        """Ordered top-level fields of a resource declaration."""
        body: Dict[str, Any] = {}
        if resource.parent:
            body["parent"] = Identifier(resource.parent)
        if resource.scope:
            body["scope"] = Identifier(resource.scope)
        body["name"] = resource.name
        if resource.location is not None:
            body["location"] = resource.location
        if resource.kind:
            body["kind"] = resource.kind
        if resource.sku:
            body["sku"] = resource.sku
        if resource.identity:
            body["identity"] = resource.identity
        if resource.tags:
            body["tags"] = resource.tags
        if resource.properties:
            body["properties"] = resource.properties
        if resource.depends_on:
            body["dependsOn"] = [Identifier(d) for d in resource.depends_on]
        return body

    def resource(self, resource: ResourceDeclaration) -> str:
        header = f"resource {resource.symbol} '{resource.type}@{resource.api_version}' = "
        return header + self.value(self.resource_body(resource))
