"""
Node lowerers: one per platform tag.

Each lowerer turns a graph node plus its resolved dependencies into
resources named ``{short_name}-{kind}`` and tagged with the node id and
platform. Node properties use the upstream camelCase keys
(``memorySize``, ``keySchema``); snake_case spellings are accepted too.
"""

from __future__ import annotations

from typing import Any

from graphstack.domain.models import GraphNode
from graphstack.lowering.constants import (
    APIGATEWAY_PLATFORM,
    APIGW_API,
    APIGW_STAGE,
    DYNAMODB_PLATFORM,
    DYNAMODB_TABLE,
    LAMBDA_FUNCTION,
    LAMBDA_PLATFORM,
    S3_BUCKET,
    S3_BUCKET_VERSIONING,
    S3_PLATFORM,
    SNS_PLATFORM,
    SNS_TOPIC,
    SQS_PLATFORM,
    SQS_QUEUE,
)
from graphstack.lowering.naming import node_tags, physical_name, resource_name
from graphstack.lowering.types import LoweredResource, LoweringContext, Ref, ResolvedDeps, ref_targets

DEFAULT_RUNTIME = "nodejs20.x"
DEFAULT_HANDLER = "index.handler"
DEFAULT_MEMORY_SIZE = 128
DEFAULT_TIMEOUT = 30

DEFAULT_VISIBILITY_TIMEOUT = 30
DEFAULT_MESSAGE_RETENTION = 345600  # 4 days

DEFAULT_BILLING_MODE = "PAY_PER_REQUEST"
DEFAULT_HASH_KEY = {"name": "id", "type": "S"}


def node_property(node: GraphNode, name: str, default: Any = None) -> Any:
    """Read a camelCase node property, falling back to its snake_case spelling."""
    if name in node.properties and node.properties[name] is not None:
        return node.properties[name]
    snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in name)
    value = node.properties.get(snake)
    return default if value is None else value


class LambdaLowerer:
    """aws-lambda -> Lambda function."""

    @property
    def platform(self) -> str:
        return LAMBDA_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        config = context.adapter_config
        properties: dict[str, Any] = {
            "name": physical_name(config.service_name, node.id),
            "runtime": node_property(node, "runtime", DEFAULT_RUNTIME),
            "handler": node_property(node, "handler", DEFAULT_HANDLER),
            "memory_size": node_property(node, "memorySize", DEFAULT_MEMORY_SIZE),
            "timeout": node_property(node, "timeout", DEFAULT_TIMEOUT),
        }
        if resolved_deps.role_name:
            properties["role"] = Ref(resolved_deps.role_name)
        if config.code_path:
            properties["code"] = {"path": config.code_path}
        if config.code_s3:
            properties["s3_bucket"] = config.code_s3.bucket
            properties["s3_key"] = config.code_s3.key
        # Never emit an empty environment block
        if resolved_deps.env_vars:
            properties["environment"] = {"variables": dict(sorted(resolved_deps.env_vars.items()))}
        properties["tags"] = node_tags(node.id, self.platform)

        # Role first, then whatever the environment refs point at
        depends_on = (resolved_deps.role_name,) if resolved_deps.role_name else ()
        depends_on += tuple(
            name for name in ref_targets(resolved_deps.env_vars.values()) if name not in depends_on
        )

        return [
            LoweredResource(
                name=resource_name(node.id, "function"),
                resource_type=LAMBDA_FUNCTION,
                properties=properties,
                source_id=node.id,
                depends_on=depends_on,
            )
        ]


class SqsLowerer:
    """aws-sqs -> SQS queue."""

    @property
    def platform(self) -> str:
        return SQS_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        return [
            LoweredResource(
                name=resource_name(node.id, "queue"),
                resource_type=SQS_QUEUE,
                properties={
                    "name": physical_name(context.adapter_config.service_name, node.id),
                    "visibility_timeout_seconds": node_property(
                        node, "visibilityTimeout", DEFAULT_VISIBILITY_TIMEOUT
                    ),
                    "message_retention_seconds": node_property(
                        node, "messageRetention", DEFAULT_MESSAGE_RETENTION
                    ),
                    "tags": node_tags(node.id, self.platform),
                },
                source_id=node.id,
            )
        ]


class DynamoDbLowerer:
    """aws-dynamodb -> DynamoDB table (hash key ``id``/``S`` unless a key schema is given)."""

    @property
    def platform(self) -> str:
        return DYNAMODB_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        key_schema = node_property(node, "keySchema") or {}
        hash_key = _key(key_schema, "hashKey") or dict(DEFAULT_HASH_KEY)
        range_key = _key(key_schema, "rangeKey")

        attributes = [{"name": hash_key["name"], "type": hash_key["type"]}]
        properties: dict[str, Any] = {
            "name": physical_name(context.adapter_config.service_name, node.id),
            "billing_mode": node_property(node, "billingMode", DEFAULT_BILLING_MODE),
            "hash_key": hash_key["name"],
        }
        if range_key:
            properties["range_key"] = range_key["name"]
            attributes.append({"name": range_key["name"], "type": range_key["type"]})
        properties["attributes"] = attributes
        properties["tags"] = node_tags(node.id, self.platform)

        return [
            LoweredResource(
                name=resource_name(node.id, "table"),
                resource_type=DYNAMODB_TABLE,
                properties=properties,
                source_id=node.id,
            )
        ]


def _key(key_schema: dict[str, Any], name: str) -> dict[str, Any] | None:
    snake = "hash_key" if name == "hashKey" else "range_key"
    key = key_schema.get(name) or key_schema.get(snake)
    if not key:
        return None
    return {"name": key["name"], "type": key.get("type", "S")}


class S3Lowerer:
    """aws-s3 -> S3 bucket, plus a versioning resource when ``versioning`` is true."""

    @property
    def platform(self) -> str:
        return S3_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        bucket_name = resource_name(node.id, "bucket")
        resources = [
            LoweredResource(
                name=bucket_name,
                resource_type=S3_BUCKET,
                properties={
                    "bucket": physical_name(context.adapter_config.service_name, node.id),
                    "tags": node_tags(node.id, self.platform),
                },
                source_id=node.id,
            )
        ]

        if node.properties.get("versioning") is True:
            resources.append(
                LoweredResource(
                    name=resource_name(node.id, "versioning"),
                    resource_type=S3_BUCKET_VERSIONING,
                    properties={
                        "bucket": Ref(bucket_name),
                        "versioning_configuration": {"status": "Enabled"},
                        "tags": node_tags(node.id, self.platform),
                    },
                    source_id=node.id,
                    depends_on=(bucket_name,),
                )
            )

        return resources


class ApiGatewayLowerer:
    """aws-apigateway -> HTTP API and its auto-deploying ``$default`` stage."""

    @property
    def platform(self) -> str:
        return APIGATEWAY_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        api_name = resource_name(node.id, "api")
        tags = node_tags(node.id, self.platform)

        return [
            LoweredResource(
                name=api_name,
                resource_type=APIGW_API,
                properties={
                    "name": physical_name(context.adapter_config.service_name, node.id),
                    "protocol_type": "HTTP",
                    "tags": tags,
                },
                source_id=node.id,
            ),
            LoweredResource(
                name=resource_name(node.id, "stage"),
                resource_type=APIGW_STAGE,
                properties={
                    "api_id": Ref(api_name),
                    "name": "$default",
                    "auto_deploy": True,
                    "tags": dict(tags),
                },
                source_id=node.id,
                depends_on=(api_name,),
            ),
        ]


class SnsLowerer:
    """aws-sns -> SNS topic."""

    @property
    def platform(self) -> str:
        return SNS_PLATFORM

    def lower(
        self,
        node: GraphNode,
        context: LoweringContext,
        resolved_deps: ResolvedDeps,
    ) -> list[LoweredResource]:
        return [
            LoweredResource(
                name=resource_name(node.id, "topic"),
                resource_type=SNS_TOPIC,
                properties={
                    "name": physical_name(context.adapter_config.service_name, node.id),
                    "tags": node_tags(node.id, self.platform),
                },
                source_id=node.id,
            )
        ]
