"""
Pulumi AWS constructor table.

Each entry takes ``(name, properties, opts)`` with refs already resolved
and returns the live provider resource. Planned properties use the
provider's keyword names, so most resources pass straight through; a few
need reshaping first.
"""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional

import pulumi

from graphstack.lowering import constants as c

ResourceConstructor = Callable[[str, Mapping[str, Any], Optional[pulumi.ResourceOptions]], Any]

# Provider resources without a ``tags`` argument
UNTAGGED_TYPES: frozenset[str] = frozenset(
    {
        c.LAMBDA_PERMISSION,
        c.APIGW_INTEGRATION,
        c.APIGW_ROUTE,
        c.IAM_ROLE_POLICY_ATTACHMENT,
        c.S3_BUCKET_VERSIONING,
        c.EC2_SECURITY_GROUP_RULE,
    }
)


def _concat(prefix: str, value: Any, suffix: str = "") -> Any:
    if isinstance(value, pulumi.Output):
        return pulumi.Output.concat(prefix, value, suffix)
    return f"{prefix}{value}{suffix}"


def _function_code(props: MutableMapping[str, Any]) -> None:
    code = props.get("code")
    if isinstance(code, Mapping) and "path" in code:
        props["code"] = pulumi.FileArchive(code["path"])


def _route_target(props: MutableMapping[str, Any]) -> None:
    if "target" in props:
        props["target"] = _concat("integrations/", props["target"])


def _permission_source(props: MutableMapping[str, Any]) -> None:
    if "source_arn" in props:
        props["source_arn"] = _concat("", props["source_arn"], "/*/*")


SHAPE_ADAPTERS: Dict[str, Callable[[MutableMapping[str, Any]], None]] = {
    c.LAMBDA_FUNCTION: _function_code,
    c.APIGW_ROUTE: _route_target,
    c.LAMBDA_PERMISSION: _permission_source,
}


def adapt_properties(resource_type: str, properties: Mapping[str, Any]) -> Dict[str, Any]:
    """Reshape resolved properties into the provider's constructor arguments."""
    props = dict(properties)
    if resource_type in UNTAGGED_TYPES:
        props.pop("tags", None)
    adapter = SHAPE_ADAPTERS.get(resource_type)
    if adapter is not None:
        adapter(props)
    return props


def _provider_classes() -> Dict[str, type]:
    import pulumi_aws as aws

    return {
        c.IAM_ROLE: aws.iam.Role,
        c.IAM_POLICY: aws.iam.Policy,
        c.IAM_ROLE_POLICY_ATTACHMENT: aws.iam.RolePolicyAttachment,
        c.LAMBDA_FUNCTION: aws.lambda_.Function,
        c.LAMBDA_EVENT_SOURCE_MAPPING: aws.lambda_.EventSourceMapping,
        c.LAMBDA_PERMISSION: aws.lambda_.Permission,
        c.SQS_QUEUE: aws.sqs.Queue,
        c.SSM_PARAMETER: aws.ssm.Parameter,
        c.EC2_SECURITY_GROUP_RULE: aws.ec2.SecurityGroupRule,
        c.DYNAMODB_TABLE: aws.dynamodb.Table,
        c.S3_BUCKET: aws.s3.Bucket,
        c.S3_BUCKET_VERSIONING: aws.s3.BucketVersioningV2,
        c.APIGW_API: aws.apigatewayv2.Api,
        c.APIGW_STAGE: aws.apigatewayv2.Stage,
        c.APIGW_INTEGRATION: aws.apigatewayv2.Integration,
        c.APIGW_ROUTE: aws.apigatewayv2.Route,
        c.SNS_TOPIC: aws.sns.Topic,
    }


def _bind(resource_type: str, cls: type) -> ResourceConstructor:
    def construct(
        name: str,
        properties: Mapping[str, Any],
        opts: Optional[pulumi.ResourceOptions] = None,
    ) -> Any:
        return cls(name, opts=opts, **adapt_properties(resource_type, properties))

    return construct


@lru_cache(maxsize=1)
def default_constructors() -> Mapping[str, ResourceConstructor]:
    """Constructor table for every resource type the lowerers emit."""
    return MappingProxyType(
        {resource_type: _bind(resource_type, cls) for resource_type, cls in _provider_classes().items()}
    )
