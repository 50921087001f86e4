"""Resolution of config value sources into literals, refs or secret markers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from graphstack.domain.models import (
    ConfigIntent,
    GraphNode,
    GraphSnapshot,
    LiteralValue,
    ReferenceValue,
    SecretValue,
)
from graphstack.lowering.constants import (
    APIGATEWAY_PLATFORM,
    DYNAMODB_PLATFORM,
    S3_PLATFORM,
    SNS_PLATFORM,
    SQS_PLATFORM,
)
from graphstack.lowering.naming import short_name
from graphstack.lowering.types import Ref, SecretRef

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReferenceTarget:
    """Which resource a config reference lands on, and its default output field."""

    resource_suffix: str
    default_output_field: str | None


# default_output_field None means the caller-supplied field is used
PLATFORM_REF_MAP: dict[str, ReferenceTarget] = {
    SQS_PLATFORM: ReferenceTarget("queue", "url"),
    DYNAMODB_PLATFORM: ReferenceTarget("table", "name"),
    APIGATEWAY_PLATFORM: ReferenceTarget("api", None),
    S3_PLATFORM: ReferenceTarget("bucket", "bucket"),
    SNS_PLATFORM: ReferenceTarget("topic", "arn"),
}

_NODE_KIND_PREFIXES = ("platform:", "component:")


def resolve_node(snapshot: GraphSnapshot, node_ref: str) -> GraphNode | None:
    """Find a node by exact id, then by ``platform:`` and ``component:`` prefixes."""
    node = snapshot.get_node(node_ref)
    if node is not None:
        return node
    for prefix in _NODE_KIND_PREFIXES:
        node = snapshot.get_node(f"{prefix}{node_ref}")
        if node is not None:
            return node
    return None


def resolve_config_reference(snapshot: GraphSnapshot, node_ref: str, field: str) -> Ref:
    """
    Convert a logical reference (node + field) into a planned-resource ref.

    Unknown nodes or platforms fall back to the raw ``{node_ref}.{field}``
    ref. That ref will not resolve at link time; it is kept verbatim so the
    failure names the original reference.
    """
    node = resolve_node(snapshot, node_ref)
    if node is not None and node.platform is not None:
        target = PLATFORM_REF_MAP.get(node.platform)
        if target is not None:
            output_field = target.default_output_field or field
            return Ref(f"{short_name(node.id)}-{target.resource_suffix}.{output_field}")

    logger.debug("config_reference_unresolved", node_ref=node_ref, field=field)
    return Ref(f"{node_ref}.{field}")


def resolve_config_value(intent: ConfigIntent, snapshot: GraphSnapshot) -> Any:
    source = intent.value_source
    if isinstance(source, LiteralValue):
        return _literal_string(source.value)
    if isinstance(source, ReferenceValue):
        return resolve_config_reference(snapshot, source.node_ref, source.field)
    if isinstance(source, SecretValue):
        return SecretRef(source.secret_ref)
    raise TypeError(f"Unsupported config value source: {source!r}")


def _literal_string(value: str | int | float | bool) -> str:
    # Environment variables and SSM values are strings; keep JSON booleans lowercase
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
