"""
Input models consumed by the lowering pipeline.

Intents and the graph snapshot are produced upstream (binder/kernel) and are
treated as immutable here. Field names are snake_case; the camelCase wire
names used by the upstream JSON (``sourceEdgeId``, ``targetNodeRef``, ...)
are accepted as aliases.
"""

from __future__ import annotations

from typing import Annotated, Any, Iterable, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

EdgeType = Literal["bindsTo", "triggers", "dependsOn", "contains"]


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# --- Intents -----------------------------------------------------------------


class IamPrincipal(_Model):
    node_ref: str
    role: str = "function"


class IamResource(_Model):
    node_ref: str
    resource_type: str
    scope: Literal["specific", "pattern"] | None = None
    pattern: str | None = None


class IamAction(_Model):
    level: Literal["read", "write", "admin"]
    action: str


class IamCondition(_Model):
    key: str
    operator: Literal["equals", "notEquals", "contains", "startsWith"]
    value: str


class IamIntent(_Model):
    """Backend-neutral access grant: ``principal`` may perform ``actions`` on ``resource``."""

    type: Literal["iam"] = "iam"
    schema_version: str = "1.0.0"
    source_edge_id: str
    principal: IamPrincipal
    resource: IamResource
    actions: tuple[IamAction, ...] = ()
    conditions: tuple[IamCondition, ...] | None = None


class PortRange(_Model):
    from_: int = Field(alias="from")
    to: int


class NetworkEndpoint(_Model):
    node_ref: str
    port: int | None = None
    port_range: PortRange | None = None


class NetworkProtocol(_Model):
    protocol: Literal["tcp", "udp", "any"]
    ports: tuple[int, ...] | None = None


class NetworkIntent(_Model):
    type: Literal["network"] = "network"
    schema_version: str = "1.0.0"
    source_edge_id: str
    direction: Literal["ingress", "egress"]
    source: NetworkEndpoint
    destination: NetworkEndpoint
    protocol: NetworkProtocol


class LiteralValue(_Model):
    type: Literal["literal"] = "literal"
    value: str | int | float | bool


class ReferenceValue(_Model):
    type: Literal["reference"] = "reference"
    node_ref: str
    field: str


class SecretValue(_Model):
    type: Literal["secret"] = "secret"
    secret_ref: str


ConfigValueSource = Annotated[
    Union[LiteralValue, ReferenceValue, SecretValue],
    Field(discriminator="type"),
]


class ConfigIntent(_Model):
    """Inject ``key`` into the runtime configuration of ``target_node_ref``."""

    type: Literal["config"] = "config"
    schema_version: str = "1.0.0"
    source_edge_id: str
    target_node_ref: str
    key: str
    value_source: ConfigValueSource


class TelemetryConfig(_Model):
    enabled: bool = True
    sampling_rate: float | None = None
    destination: str | None = None


class TelemetryIntent(_Model):
    type: Literal["telemetry"] = "telemetry"
    schema_version: str = "1.0.0"
    source_edge_id: str
    target_node_ref: str
    telemetry_type: Literal["metrics", "traces", "logs"]
    config: TelemetryConfig = Field(default_factory=TelemetryConfig)


Intent = Annotated[
    Union[IamIntent, NetworkIntent, ConfigIntent, TelemetryIntent],
    Field(discriminator="type"),
]

_INTENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Intent)


def parse_intent(data: Mapping[str, Any]) -> IamIntent | NetworkIntent | ConfigIntent | TelemetryIntent:
    """Validate a raw intent mapping into its typed variant."""
    return _INTENT_ADAPTER.validate_python(data)


def parse_intents(items: Iterable[Mapping[str, Any]]) -> list[Any]:
    return [parse_intent(item) for item in items]


# --- Graph -------------------------------------------------------------------


class GraphNode(_Model):
    """A typed graph node, addressed as ``{kind}:{short_name}``."""

    id: str
    type: str = "component"
    properties: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_metadata(cls, data: Any) -> Any:
        # Upstream snapshots nest properties under metadata.properties
        if isinstance(data, Mapping) and "properties" not in data and "metadata" in data:
            data = dict(data)
            metadata = data.pop("metadata") or {}
            data["properties"] = dict(metadata.get("properties", {}))
        return data

    @property
    def platform(self) -> str | None:
        value = self.properties.get("platform")
        if isinstance(value, str) and value:
            return value
        return None


class GraphEdge(_Model):
    id: str
    type: EdgeType
    source: str
    target: str
    binding_config: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_metadata(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "metadata" in data and not (
            "binding_config" in data or "bindingConfig" in data
        ):
            data = dict(data)
            metadata = data.pop("metadata") or {}
            data["binding_config"] = dict(metadata.get("bindingConfig", {}))
        return data


class GraphSnapshot(_Model):
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


# --- Adapter configuration ---------------------------------------------------


class CodeS3Location(_Model):
    bucket: str
    key: str


class AdapterConfig(_Model):
    """Target region and naming for one lowering/deploy pass."""

    region: str
    service_name: str
    code_path: str | None = None
    code_s3: CodeS3Location | None = None
    # Correlation fields passed through from tool surfaces
    trace_id: str | None = None
    tool_version: str | None = None
    contract_version: str | None = None
