"""
Intent lowerers: IAM, network and config intents -> AWS resources.

Lowerers are pure. Malformed input raises :class:`LoweringError`; the
adapter turns that into an error diagnostic for the offending intent.
"""

from __future__ import annotations

import json
from typing import Any

from graphstack.core.errors import LoweringError
from graphstack.domain.models import ConfigIntent, IamIntent, NetworkIntent
from graphstack.lowering.constants import (
    APIGATEWAY_PLATFORM,
    DYNAMODB_PLATFORM,
    IAM_POLICY,
    IAM_ROLE,
    IAM_ROLE_POLICY_ATTACHMENT,
    LAMBDA_BASIC_EXECUTION_POLICY_ARN,
    LAMBDA_PLATFORM,
    S3_PLATFORM,
    SNS_PLATFORM,
    SQS_PLATFORM,
    SSM_PARAMETER,
)
from graphstack.lowering.naming import (
    EDGE_TAG,
    KEY_TAG,
    PRINCIPAL_TAG,
    RESOURCE_TAG,
    TARGET_TAG,
    exec_role_name,
    physical_name,
    short_name,
)
from graphstack.lowering.references import resolve_config_value, resolve_node
from graphstack.lowering.types import LoweredResource, LoweringContext, Ref, ref_targets

POLICY_VERSION = "2012-10-17"

# Intent action name -> IAM actions, per backend-neutral resource type
ACTION_MAP: dict[str, dict[str, tuple[str, ...]]] = {
    "queue": {
        "read": ("sqs:ReceiveMessage", "sqs:GetQueueAttributes", "sqs:GetQueueUrl"),
        "write": ("sqs:SendMessage", "sqs:GetQueueAttributes", "sqs:GetQueueUrl"),
        "admin": ("sqs:*",),
    },
    "bucket": {
        "read": ("s3:GetObject", "s3:ListBucket"),
        "write": ("s3:PutObject", "s3:GetObject", "s3:ListBucket"),
        "admin": ("s3:*",),
    },
    "table": {
        "read": ("dynamodb:GetItem", "dynamodb:Query", "dynamodb:Scan"),
        "write": (
            "dynamodb:PutItem",
            "dynamodb:UpdateItem",
            "dynamodb:DeleteItem",
            "dynamodb:GetItem",
            "dynamodb:Query",
        ),
        "admin": ("dynamodb:*",),
    },
    "topic": {
        "read": ("sns:GetTopicAttributes", "sns:ListSubscriptionsByTopic"),
        "write": ("sns:Publish", "sns:GetTopicAttributes"),
        "admin": ("sns:*",),
    },
    "api": {
        "invoke": ("lambda:InvokeFunction",),
        "read": ("execute-api:Invoke",),
        "write": ("execute-api:Invoke",),
        "admin": ("execute-api:*",),
    },
}

DEFAULT_ACTIONS: dict[str, tuple[str, ...]] = {
    "read": ("*:Get*", "*:List*"),
    "write": ("*:Get*", "*:List*", "*:Put*", "*:Update*"),
    "admin": ("*:*",),
}

# Account field is always a wildcard; lowerers never emit account-qualified ARNs
RESOURCE_ARN_TEMPLATES: dict[str, tuple[str, ...]] = {
    "queue": ("arn:aws:sqs:{region}:*:{name}",),
    "table": ("arn:aws:dynamodb:{region}:*:table/{name}",),
    "bucket": ("arn:aws:s3:::{name}", "arn:aws:s3:::{name}/*"),
    "topic": ("arn:aws:sns:{region}:*:{name}",),
    "function": ("arn:aws:lambda:{region}:*:function:{name}",),
    "api": ("arn:aws:execute-api:{region}:*:*",),
}

PLATFORM_RESOURCE_TYPES: dict[str, str] = {
    SQS_PLATFORM: "queue",
    DYNAMODB_PLATFORM: "table",
    S3_PLATFORM: "bucket",
    SNS_PLATFORM: "topic",
    LAMBDA_PLATFORM: "function",
    APIGATEWAY_PLATFORM: "api",
}

CONDITION_OPERATORS: dict[str, str] = {
    "equals": "StringEquals",
    "notEquals": "StringNotEquals",
    "contains": "StringLike",
    "startsWith": "StringLike",
}

LAMBDA_ASSUME_ROLE_POLICY: dict[str, Any] = {
    "Version": POLICY_VERSION,
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {"Service": "lambda.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }
    ],
}


class IamIntentLowerer:
    """Lowers an IAM intent into role, policy and two role attachments."""

    @property
    def intent_type(self) -> str:
        return "iam"

    def lower(self, intent: IamIntent, context: LoweringContext) -> list[LoweredResource]:
        principal = short_name(intent.principal.node_ref)
        role_name = exec_role_name(intent.principal.node_ref)
        policy_name = f"{principal}-{short_name(intent.resource.node_ref)}-policy"
        attachment_name = f"{policy_name}-attachment"
        basic_attachment_name = f"{principal}-basic-execution-attachment"

        statement: dict[str, Any] = {
            "Effect": "Allow",
            "Action": self.resolve_actions(intent),
            "Resource": self.resolve_resource(intent, context),
        }
        if intent.conditions:
            statement["Condition"] = self.build_conditions(intent)

        return [
            LoweredResource(
                name=role_name,
                resource_type=IAM_ROLE,
                properties={
                    "assume_role_policy": json.dumps(LAMBDA_ASSUME_ROLE_POLICY),
                    "tags": {PRINCIPAL_TAG: intent.principal.node_ref},
                },
                source_id=intent.source_edge_id,
            ),
            LoweredResource(
                name=policy_name,
                resource_type=IAM_POLICY,
                properties={
                    "policy": json.dumps({"Version": POLICY_VERSION, "Statement": [statement]}),
                    "tags": {
                        RESOURCE_TAG: intent.resource.node_ref,
                        EDGE_TAG: intent.source_edge_id,
                    },
                },
                source_id=intent.source_edge_id,
            ),
            LoweredResource(
                name=attachment_name,
                resource_type=IAM_ROLE_POLICY_ATTACHMENT,
                properties={
                    "role": Ref(role_name),
                    "policy_arn": Ref(policy_name),
                },
                source_id=intent.source_edge_id,
                depends_on=(role_name, policy_name),
            ),
            LoweredResource(
                name=basic_attachment_name,
                resource_type=IAM_ROLE_POLICY_ATTACHMENT,
                properties={
                    "role": Ref(role_name),
                    "policy_arn": LAMBDA_BASIC_EXECUTION_POLICY_ARN,
                },
                source_id=intent.source_edge_id,
                depends_on=(role_name,),
            ),
        ]

    def resolve_actions(self, intent: IamIntent) -> list[str]:
        """Map intent actions to IAM actions, de-duplicated in first-seen order."""
        type_map = ACTION_MAP.get(intent.resource.resource_type, {})
        actions: list[str] = []
        for requested in intent.actions:
            for action in type_map.get(requested.action, DEFAULT_ACTIONS.get(requested.action, ())):
                if action not in actions:
                    actions.append(action)

        if not actions:
            raise LoweringError(
                f"No IAM actions for intent '{intent.source_edge_id}'",
                {"resource_type": intent.resource.resource_type},
            )
        return actions

    def resolve_resource(self, intent: IamIntent, context: LoweringContext) -> str | list[str]:
        """
        Resolve the policy ``Resource`` field.

        - scope "pattern": the pattern, verbatim (the only way to get ``*``)
        - scope "specific": explicit pattern, else the type-derived ARN template
        - no scope: ARN template of the resolved resource node
        """
        resource = intent.resource
        if resource.scope == "pattern":
            if not resource.pattern:
                raise LoweringError(
                    f"Pattern-scoped IAM intent '{intent.source_edge_id}' has no pattern",
                    {"node_ref": resource.node_ref},
                )
            return resource.pattern

        if resource.scope == "specific":
            if resource.pattern:
                return resource.pattern
            return self._arn_for(resource.resource_type, resource.node_ref, intent, context)

        node = resolve_node(context.snapshot, resource.node_ref)
        if node is None:
            raise LoweringError(
                f"IAM intent '{intent.source_edge_id}' has no scope and resource node "
                f"'{resource.node_ref}' does not exist",
            )
        resource_type = resource.resource_type
        if resource_type not in RESOURCE_ARN_TEMPLATES and node.platform:
            resource_type = PLATFORM_RESOURCE_TYPES.get(node.platform, resource_type)
        return self._arn_for(resource_type, node.id, intent, context)

    def _arn_for(
        self,
        resource_type: str,
        node_ref: str,
        intent: IamIntent,
        context: LoweringContext,
    ) -> str | list[str]:
        templates = RESOURCE_ARN_TEMPLATES.get(resource_type)
        if templates is None:
            raise LoweringError(
                f"No ARN mapping for resource type '{resource_type}' "
                f"in IAM intent '{intent.source_edge_id}'",
                {"node_ref": node_ref},
            )
        config = context.adapter_config
        name = physical_name(config.service_name, node_ref)
        arns = [t.format(region=config.region, name=name) for t in templates]
        return arns[0] if len(arns) == 1 else arns

    def build_conditions(self, intent: IamIntent) -> dict[str, dict[str, str]]:
        conditions: dict[str, dict[str, str]] = {}
        for cond in intent.conditions or ():
            op = CONDITION_OPERATORS.get(cond.operator, "StringEquals")
            conditions.setdefault(op, {})[cond.key] = cond.value
        return conditions


class NetworkIntentLowerer:
    """
    Network intents are acknowledged but not lowered.

    Functions run outside a VPC, so there is nothing to attach security
    group rules to. The adapter reports a warning for each network intent.
    """

    @property
    def intent_type(self) -> str:
        return "network"

    def lower(self, intent: NetworkIntent, context: LoweringContext) -> list[LoweredResource]:
        return []


class ConfigIntentLowerer:
    """Lowers a config intent into an SSM parameter."""

    @property
    def intent_type(self) -> str:
        return "config"

    def lower(self, intent: ConfigIntent, context: LoweringContext) -> list[LoweredResource]:
        service = context.adapter_config.service_name
        target = short_name(intent.target_node_ref)
        value = resolve_config_value(intent, context.snapshot)

        return [
            LoweredResource(
                name=f"{service}-{target}-{intent.key}",
                resource_type=SSM_PARAMETER,
                properties={
                    "name": f"/{service}/{target}/{intent.key}",
                    "type": "String",
                    "value": value,
                    "tags": {
                        TARGET_TAG: intent.target_node_ref,
                        KEY_TAG: intent.key,
                        EDGE_TAG: intent.source_edge_id,
                    },
                },
                source_id=intent.source_edge_id,
                depends_on=ref_targets([value]),
            )
        ]


DEFAULT_INTENT_LOWERERS: tuple[Any, ...] = (
    IamIntentLowerer(),
    NetworkIntentLowerer(),
    ConfigIntentLowerer(),
)
