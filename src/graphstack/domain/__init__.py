"""Input models: intents, graph snapshot and adapter configuration."""

from graphstack.domain.models import (
    AdapterConfig,
    CodeS3Location,
    ConfigIntent,
    GraphEdge,
    GraphNode,
    GraphSnapshot,
    IamAction,
    IamCondition,
    IamIntent,
    IamPrincipal,
    IamResource,
    Intent,
    LiteralValue,
    NetworkEndpoint,
    NetworkIntent,
    NetworkProtocol,
    ReferenceValue,
    SecretValue,
    TelemetryConfig,
    TelemetryIntent,
    parse_intent,
    parse_intents,
)

__all__ = [
    "AdapterConfig",
    "CodeS3Location",
    "ConfigIntent",
    "GraphEdge",
    "GraphNode",
    "GraphSnapshot",
    "IamAction",
    "IamCondition",
    "IamIntent",
    "IamPrincipal",
    "IamResource",
    "Intent",
    "LiteralValue",
    "NetworkEndpoint",
    "NetworkIntent",
    "NetworkProtocol",
    "ReferenceValue",
    "SecretValue",
    "TelemetryConfig",
    "TelemetryIntent",
    "parse_intent",
    "parse_intents",
]
