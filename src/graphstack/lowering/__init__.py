"""Lowering package: intents and platform nodes -> AWS resource descriptors."""

from graphstack.lowering.adapter import PHASES, lower, lower_async, resolve_node_deps
from graphstack.lowering.intents import (
    ConfigIntentLowerer,
    IamIntentLowerer,
    NetworkIntentLowerer,
)
from graphstack.lowering.nodes import (
    ApiGatewayLowerer,
    DynamoDbLowerer,
    LambdaLowerer,
    S3Lowerer,
    SnsLowerer,
    SqsLowerer,
)
from graphstack.lowering.registry import (
    LEGACY_NODE_LOWERERS,
    NodeLowererRegistry,
    create_default_registry,
)
from graphstack.lowering.types import (
    AdapterResult,
    Diagnostic,
    IntentLowerer,
    LoweredResource,
    LoweringContext,
    NodeLowerer,
    Ref,
    ResolvedDeps,
    SecretRef,
)
from graphstack.lowering.validation import find_arn_leaks

__all__ = [
    "AdapterResult",
    "ApiGatewayLowerer",
    "ConfigIntentLowerer",
    "Diagnostic",
    "DynamoDbLowerer",
    "IamIntentLowerer",
    "IntentLowerer",
    "LEGACY_NODE_LOWERERS",
    "LambdaLowerer",
    "LoweredResource",
    "LoweringContext",
    "NetworkIntentLowerer",
    "NodeLowerer",
    "NodeLowererRegistry",
    "PHASES",
    "Ref",
    "ResolvedDeps",
    "S3Lowerer",
    "SecretRef",
    "SnsLowerer",
    "SqsLowerer",
    "create_default_registry",
    "find_arn_leaks",
    "lower",
    "lower_async",
    "resolve_node_deps",
]
