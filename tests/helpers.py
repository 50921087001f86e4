"""Builders for graph snapshots, intents and lowering contexts used across tests."""

from __future__ import annotations

from typing import Any, Iterable

from graphstack.domain.models import (
    AdapterConfig,
    ConfigIntent,
    GraphEdge,
    GraphNode,
    GraphSnapshot,
    IamAction,
    IamIntent,
    IamPrincipal,
    IamResource,
    LiteralValue,
    NetworkEndpoint,
    NetworkIntent,
    NetworkProtocol,
    ReferenceValue,
    SecretValue,
    TelemetryIntent,
)
from graphstack.lowering.types import LoweringContext

DEFAULT_CONFIG = AdapterConfig(region="us-east-1", service_name="test-service")


def make_node(node_id: str, platform: str | None = None, **properties: Any) -> GraphNode:
    props = dict(properties)
    if platform is not None:
        props["platform"] = platform
    kind = node_id.split(":", 1)[0] if ":" in node_id else "component"
    return GraphNode(id=node_id, type=kind, properties=props)


def make_edge(
    edge_id: str,
    edge_type: str,
    source: str,
    target: str,
    binding_config: dict[str, Any] | None = None,
) -> GraphEdge:
    return GraphEdge(
        id=edge_id,
        type=edge_type,
        source=source,
        target=target,
        binding_config=binding_config or {},
    )


def make_snapshot(
    nodes: Iterable[GraphNode] = (),
    edges: Iterable[GraphEdge] = (),
) -> GraphSnapshot:
    return GraphSnapshot(nodes=tuple(nodes), edges=tuple(edges))


def lambda_sqs_snapshot() -> GraphSnapshot:
    """component:api-handler (aws-lambda) bindsTo platform:work-queue (aws-sqs)."""
    return make_snapshot(
        nodes=[
            make_node("component:api-handler", "aws-lambda"),
            make_node("platform:work-queue", "aws-sqs"),
        ],
        edges=[make_edge("edge-1", "bindsTo", "component:api-handler", "platform:work-queue")],
    )


def gateway_snapshot(binding_config: dict[str, Any] | None = None) -> GraphSnapshot:
    """platform:public-api (aws-apigateway) triggers component:api-handler (aws-lambda)."""
    return make_snapshot(
        nodes=[
            make_node("platform:public-api", "aws-apigateway"),
            make_node("component:api-handler", "aws-lambda"),
        ],
        edges=[
            make_edge(
                "edge-gw",
                "triggers",
                "platform:public-api",
                "component:api-handler",
                binding_config,
            )
        ],
    )


def _action(name: str) -> IamAction:
    level = name if name in ("read", "write", "admin") else "read"
    return IamAction(level=level, action=name)


def make_iam_intent(
    principal: str = "component:api-handler",
    resource: str = "platform:work-queue",
    resource_type: str = "queue",
    actions: Iterable[str] = ("read",),
    *,
    edge_id: str = "edge-1",
    scope: str | None = "specific",
    pattern: str | None = None,
    conditions: Iterable[dict[str, str]] | None = None,
) -> IamIntent:
    return IamIntent(
        source_edge_id=edge_id,
        principal=IamPrincipal(node_ref=principal),
        resource=IamResource(
            node_ref=resource,
            resource_type=resource_type,
            scope=scope,
            pattern=pattern,
        ),
        actions=tuple(_action(a) for a in actions),
        conditions=tuple(conditions) if conditions is not None else None,
    )


def make_literal_config(
    key: str = "LOG_LEVEL",
    value: Any = "debug",
    target: str = "component:api-handler",
    edge_id: str = "edge-cfg",
) -> ConfigIntent:
    return ConfigIntent(
        source_edge_id=edge_id,
        target_node_ref=target,
        key=key,
        value_source=LiteralValue(value=value),
    )


def make_reference_config(
    key: str = "QUEUE_URL",
    node_ref: str = "platform:work-queue",
    field: str = "url",
    target: str = "component:api-handler",
    edge_id: str = "edge-ref",
) -> ConfigIntent:
    return ConfigIntent(
        source_edge_id=edge_id,
        target_node_ref=target,
        key=key,
        value_source=ReferenceValue(node_ref=node_ref, field=field),
    )


def make_secret_config(
    key: str = "API_TOKEN",
    secret_ref: str = "prod/api-token",
    target: str = "component:api-handler",
    edge_id: str = "edge-secret",
) -> ConfigIntent:
    return ConfigIntent(
        source_edge_id=edge_id,
        target_node_ref=target,
        key=key,
        value_source=SecretValue(secret_ref=secret_ref),
    )


def make_network_intent(edge_id: str = "edge-net") -> NetworkIntent:
    return NetworkIntent(
        source_edge_id=edge_id,
        direction="egress",
        source=NetworkEndpoint(node_ref="component:api-handler"),
        destination=NetworkEndpoint(node_ref="platform:work-queue", port=443),
        protocol=NetworkProtocol(protocol="tcp"),
    )


def make_telemetry_intent(edge_id: str = "edge-tel") -> TelemetryIntent:
    return TelemetryIntent(
        source_edge_id=edge_id,
        target_node_ref="component:api-handler",
        telemetry_type="traces",
    )


def make_context(
    intents: Iterable[Any] = (),
    snapshot: GraphSnapshot | None = None,
    config: AdapterConfig | None = None,
) -> LoweringContext:
    return LoweringContext(
        intents=list(intents),
        snapshot=snapshot if snapshot is not None else make_snapshot(),
        adapter_config=config or DEFAULT_CONFIG,
    )


def full_stack_context() -> LoweringContext:
    """Lambda + queue + gateway + table + bucket + topic, with IAM and config intents."""
    snapshot = make_snapshot(
        nodes=[
            make_node("component:api-handler", "aws-lambda"),
            make_node("platform:work-queue", "aws-sqs"),
            make_node("platform:public-api", "aws-apigateway"),
            make_node("platform:orders", "aws-dynamodb"),
            make_node("platform:uploads", "aws-s3", versioning=True),
            make_node("platform:events", "aws-sns"),
            make_node("component:docs"),
        ],
        edges=[
            make_edge("edge-1", "bindsTo", "component:api-handler", "platform:work-queue"),
            make_edge(
                "edge-gw",
                "triggers",
                "platform:public-api",
                "component:api-handler",
                {"route": "/items", "method": "GET"},
            ),
        ],
    )
    intents = [
        make_iam_intent(edge_id="edge-iam-q"),
        make_iam_intent(
            resource="platform:orders", resource_type="table", actions=("write",), edge_id="edge-iam-t"
        ),
        make_reference_config(),
        make_literal_config(),
        make_telemetry_intent(),
    ]
    return make_context(intents, snapshot)
