"""Resource graph data model."""
import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from graphlib import CycleError, TopologicalSorter
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from ..errors import DependencyResolutionError, NameConflictError, ParameterValidationError
from ..resolve.operations import ResolveOp, ResourceHandle, ensure_supported
from .kinds import API_VERSIONS

LATEST_VERSION = "latest"


@dataclass(frozen=True)
class Ref:
    """A computed binding: a value read from another resource."""
    source: str
    operation: ResolveOp


@dataclass(frozen=True)
class Concat:
    """String interpolation of literals and expressions."""
    parts: Tuple[Any, ...]


@dataclass(frozen=True)
class ParamRef:
    """Reference to a template parameter or variable, carrying its resolved value."""
    name: str
    value: Any


@dataclass(frozen=True)
class Call:
    """Template function call, optionally followed by a member access."""
    function: str
    args: Tuple[Any, ...] = ()
    member: Optional[str] = None


@dataclass(frozen=True)
class Lookup:
    """Value chosen from a mapping keyed by a parameter, with a fallback."""
    key: ParamRef
    mapping: Tuple[Tuple[str, str], ...]
    default: str

    @property
    def value(self) -> str:
        return dict(self.mapping).get(self.key.value, self.default)


Expression = Union[Ref, Concat, ParamRef, Call, Lookup]


def iter_refs(value: Any) -> Iterator[Ref]:
    """Yield every Ref nested anywhere inside a property value."""
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, Concat):
        for part in value.parts:
            yield from iter_refs(part)
    elif isinstance(value, Call):
        for arg in value.args:
            yield from iter_refs(arg)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_refs(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_refs(item)


def to_plain(value: Any) -> Any:
    """Convert a property value into JSON-serialisable data."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Ref):
        return {"$ref": value.source, "op": value.operation.value}
    if isinstance(value, Concat):
        return {"$concat": [to_plain(p) for p in value.parts]}
    if isinstance(value, ParamRef):
        return {"$param": value.name, "value": to_plain(value.value)}
    if isinstance(value, Call):
        return {"$call": value.function, "args": [to_plain(a) for a in value.args], "member": value.member}
    if isinstance(value, Lookup):
        return {"$lookup": to_plain(value.key), "mapping": [list(m) for m in value.mapping], "default": value.default}
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class ModelDeployment:
    """One model exposed by the generative-AI account."""
    name: str
    model: str
    version: str = LATEST_VERSION
    scale: str = "Standard"
    capacity: int = 10
    format: str = "OpenAI"

    def __post_init__(self):
        if not self.version:
            object.__setattr__(self, "version", LATEST_VERSION)


@dataclass
class Parameter:
    """Template parameter definition."""
    name: str
    type: str = "string"
    default: Optional[Any] = None
    allowed_values: Optional[List[Any]] = None
    description: Optional[str] = None

    def validate(self, value: Any) -> Any:
        """Return the value if allowed.

        Raises:
            ParameterValidationError: If the value is not in the allowed set.
        """
        if self.allowed_values is not None and value not in self.allowed_values:
            allowed = ", ".join(str(v) for v in self.allowed_values)
            raise ParameterValidationError(
                f"'{value}' is not an allowed value for {self.name} (allowed: {allowed})"
            )
        return value


@dataclass
class ResourceDeclaration:
    """Desired state for one managed resource."""
    symbol: str
    type: str
    name: Any
    location: Optional[Any] = None
    api_version: Optional[str] = None
    kind: Optional[str] = None
    sku: Optional[Dict[str, Any]] = None
    identity: Optional[Dict[str, str]] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    tags: Optional[Dict[str, str]] = None
    parent: Optional[str] = None
    scope: Optional[str] = None
    depends_on: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.api_version is None:
            self.api_version = API_VERSIONS[self.type]

    @property
    def has_identity(self) -> bool:
        return bool(self.identity) and "SystemAssigned" in self.identity.get("type", "")

    def refs(self) -> List[Ref]:
        return list(iter_refs([self.name, self.location, self.sku, self.properties]))

    def edges(self) -> Set[str]:
        """Symbols this declaration must wait for."""
        targets = set(self.depends_on)
        targets.update(ref.source for ref in self.refs())
        if self.parent:
            targets.add(self.parent)
        if self.scope:
            targets.add(self.scope)
        targets.discard(self.symbol)
        return targets

    def to_dict(self) -> Dict[str, Any]:
        return to_plain({
            "symbol": self.symbol,
            "type": self.type,
            "apiVersion": self.api_version,
            "name": self.name,
            "location": self.location,
            "kind": self.kind,
            "sku": self.sku,
            "identity": self.identity,
            "properties": self.properties,
            "tags": self.tags,
            "parent": self.parent,
            "scope": self.scope,
            "dependsOn": sorted(self.depends_on),
        })


@dataclass
class ResourceGraph:
    """All declarations for one provisioning run plus their parameters."""
    resources: List[ResourceDeclaration] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    variables: Dict[str, Lookup] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)

    def add(self, *declarations: ResourceDeclaration) -> None:
        self.resources.extend(declarations)

    def get(self, symbol: str) -> ResourceDeclaration:
        for resource in self.resources:
            if resource.symbol == symbol:
                return resource
        raise KeyError(symbol)

    def __contains__(self, symbol: str) -> bool:
        return any(r.symbol == symbol for r in self.resources)

    def handle(self, symbol: str) -> ResourceHandle:
        """Build the resolver view of a declared resource.

        Raises:
            DependencyResolutionError: If no resource with that symbol is declared.
        """
        if symbol not in self:
            raise DependencyResolutionError(f"'{symbol}' is not declared in the graph", resource=symbol)
        resource = self.get(symbol)
        parent_name = None
        if resource.parent and resource.parent in self:
            parent_name = self.get(resource.parent).name
        return ResourceHandle(
            symbol=resource.symbol,
            type=resource.type,
            name=resource.name if isinstance(resource.name, str) else None,
            has_identity=resource.has_identity,
            parent_name=parent_name if isinstance(parent_name, str) else None,
        )

    def edges(self) -> Dict[str, Set[str]]:
        return {r.symbol: r.edges() for r in self.resources}

    def validate(self) -> None:
        """Check the graph is something the engine can apply.

        Raises:
            NameConflictError: On duplicate symbols or duplicate resource names of one type.
            DependencyResolutionError: On missing sources, unsupported operations or cycles.
        """
        seen_symbols = set()
        seen_names = set()
        for resource in self.resources:
            if resource.symbol in seen_symbols:
                raise NameConflictError("duplicate logical name", resource=resource.symbol)
            seen_symbols.add(resource.symbol)
            if isinstance(resource.name, str):
                key = (resource.type, resource.parent, resource.name.lower())
                if key in seen_names:
                    raise NameConflictError(
                        f"resource name '{resource.name}' is declared twice for {resource.type}",
                        resource=resource.symbol,
                    )
                seen_names.add(key)

        for resource in self.resources:
            for target in resource.edges():
                if target not in seen_symbols:
                    raise DependencyResolutionError(
                        f"depends on undeclared resource '{target}'", resource=resource.symbol
                    )
            for ref in resource.refs():
                ensure_supported(self.handle(ref.source), ref.operation)

        for value in self.outputs.values():
            for ref in iter_refs(value):
                ensure_supported(self.handle(ref.source), ref.operation)

        self.topological_order()

    def topological_order(self) -> List[str]:
        """Symbols ordered so every resource follows its dependencies.

        Raises:
            DependencyResolutionError: If the declarations contain a cycle.
        """
        sorter = TopologicalSorter()
        for resource in self.resources:
            sorter.add(resource.symbol, *sorted(resource.edges()))
        try:
            return list(sorter.static_order())
        except CycleError as e:
            cycle = " -> ".join(e.args[1])
            raise DependencyResolutionError(f"dependency cycle: {cycle}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": [
                {"name": p.name, "default": p.default, "allowed": p.allowed_values} for p in self.parameters
            ],
            "variables": {name: to_plain(v) for name, v in self.variables.items()},
            "resources": [r.to_dict() for r in self.resources],
            "outputs": {name: to_plain(v) for name, v in self.outputs.items()},
        }

    def fingerprint(self) -> str:
        """Stable digest of the declared desired state."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
