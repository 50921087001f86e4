"""Core value types passed between lowerers, the adapter and the planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping, Protocol, Sequence, runtime_checkable

from graphstack.domain.models import AdapterConfig, GraphNode, GraphSnapshot

Severity = Literal["error", "warning", "info"]

RetriableReason = Literal[
    "rate_limit",
    "upstream_timeout",
    "upstream_5xx",
    "transport_unavailable",
    "worker_unavailable",
    "dependency_unavailable",
]


@dataclass(frozen=True)
class Ref:
    """Symbolic pointer to another planned resource, resolved only at link time.

    ``target`` is either ``"resource-name"`` or ``"resource-name.field"``; an
    explicit field always wins over the linker's per-property defaults.
    """

    target: str

    @property
    def resource_name(self) -> str:
        return self.target.split(".", 1)[0]

    @property
    def field(self) -> str | None:
        if "." not in self.target:
            return None
        return self.target.split(".", 1)[1]

    def to_dict(self) -> dict[str, str]:
        return {"ref": self.target}


@dataclass(frozen=True)
class SecretRef:
    """Secret indirection marker. Passed through untouched by the linker."""

    secret_ref: str

    def to_dict(self) -> dict[str, str]:
        return {"secret_ref": self.secret_ref}


def as_ref(value: Any) -> Ref | None:
    """Return ``value`` as a :class:`Ref` when it has the exact ref shape."""
    if isinstance(value, Ref):
        return value
    if isinstance(value, Mapping) and len(value) == 1 and isinstance(value.get("ref"), str):
        return Ref(value["ref"])
    return None


def is_ref(value: Any) -> bool:
    return as_ref(value) is not None


def ref_targets(values: Iterable[Any]) -> tuple[str, ...]:
    """Distinct resource names referenced by ``values``, sorted."""
    return tuple(sorted({ref.resource_name for ref in map(as_ref, values) if ref is not None}))


def to_plain(value: Any) -> Any:
    """Convert a property value into plain JSON-compatible data."""
    if isinstance(value, (Ref, SecretRef)):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class LoweredResource:
    """A single provider resource produced by a lowerer."""

    name: str
    resource_type: str
    properties: Mapping[str, Any]
    source_id: str
    depends_on: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "resource_type": self.resource_type,
            "properties": to_plain(self.properties),
            "source_id": self.source_id,
            "depends_on": list(self.depends_on),
        }


@dataclass(frozen=True)
class ResolvedDeps:
    """Per-node wiring derived from the intent list."""

    role_name: str | None = None
    env_vars: Mapping[str, Any] = field(default_factory=dict)
    security_groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class LoweringContext:
    """Everything a lowerer may read."""

    intents: Sequence[Any]
    snapshot: GraphSnapshot
    adapter_config: AdapterConfig


@dataclass(frozen=True)
class Diagnostic:
    """Severity-tagged note about an intent or node that did not lower cleanly."""

    severity: Severity
    message: str
    source_id: str
    code: str | None = None
    retriable: bool | None = None
    retriable_reason: RetriableReason | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "severity": self.severity,
            "message": self.message,
            "source_id": self.source_id,
        }
        if self.code is not None:
            data["code"] = self.code
        if self.retriable is not None:
            data["retriable"] = self.retriable
        if self.retriable_reason is not None:
            data["retriable_reason"] = self.retriable_reason
        return data


@dataclass(frozen=True)
class AdapterResult:
    """Output of :func:`graphstack.lowering.adapter.lower`."""

    resources: tuple[LoweredResource, ...]
    resource_map: Mapping[str, tuple[str, ...]]
    diagnostics: tuple[Diagnostic, ...]
    success: bool

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "resource_map": {k: list(v) for k, v in self.resource_map.items()},
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "success": self.success,
        }


@runtime_checkable
class IntentLowerer(Protocol):
    """Lowers one intent type into provider resources."""

    @property
    def intent_type(self) -> str:
        ...

    def lower(self, intent: Any, context: LoweringContext) -> list[LoweredResource]:
        ...


@runtime_checkable
class NodeLowerer(Protocol):
    """Lowers graph nodes of one platform into provider resources."""

    @property
    def platform(self) -> str:
        ...

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        ...
