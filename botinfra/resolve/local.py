"""Plan-time resolution of values derivable from declared names."""
from typing import Any

from ..graph import kinds
from ..graph.models import Call, Concat, Lookup, ParamRef, Ref, ResourceGraph
from .operations import (
    DEFERRED,
    ResolveOp,
    Resolver,
    ResourceHandle,
    ensure_supported,
    search_endpoint,
    web_hostname,
)


class LocalResolver(Resolver):
    """Resolves what is known before anything is deployed.

    Keys, connection strings, identities and resource ids only exist once the
    engine has created the resource; they resolve to DEFERRED.
    """

    def resolve(self, handle: ResourceHandle, operation: ResolveOp) -> Any:
        ensure_supported(handle, operation)
        if handle.name is None:
            return DEFERRED
        if operation == ResolveOp.NAME:
            return handle.name
        if operation == ResolveOp.ENDPOINT and handle.type == kinds.SEARCH_SERVICE:
            return search_endpoint(handle.name)
        if operation == ResolveOp.HOSTNAME and handle.type == kinds.WEB_SITE:
            return web_hostname(handle.name)
        return DEFERRED


def evaluate(value: Any, graph: ResourceGraph, resolver: Resolver) -> Any:
    """Replace every expression inside a value with what the resolver returns.

    Args:
        value: Property value, possibly nested.
        graph: Graph the references point into.
        resolver: Resolver used for each reference.

    Returns:
        The value with expressions replaced; a Concat containing any DEFERRED
        part becomes DEFERRED as a whole.
    """
    if isinstance(value, Ref):
        return resolver.resolve(graph.handle(value.source), value.operation)
    if isinstance(value, Concat):
        parts = [evaluate(part, graph, resolver) for part in value.parts]
        if any(part is DEFERRED for part in parts):
            return DEFERRED
        return "".join(str(part) for part in parts)
    if isinstance(value, (ParamRef, Lookup)):
        return value.value
    if isinstance(value, Call):
        return DEFERRED
    if isinstance(value, dict):
        return {k: evaluate(v, graph, resolver) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [evaluate(v, graph, resolver) for v in value]
    return value
