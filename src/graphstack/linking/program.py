"""
Program linker/executor.

Turns a ResourcePlan into live Pulumi resources: refs are resolved against
the resources already constructed in this run, then each resource is built
in plan order with an explicit ``depends_on`` hint.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional

import pulumi
import structlog

from graphstack.core.errors import LinkError
from graphstack.domain.models import AdapterConfig
from graphstack.linking.constructors import ResourceConstructor, default_constructors
from graphstack.lowering import constants as c
from graphstack.lowering.types import SecretRef, as_ref
from graphstack.planning.generator import ResourcePlan

logger = structlog.get_logger()

# (consumer resource type, property name) -> attribute read off the referenced resource
DEFAULT_REF_FIELDS: Dict[str, Dict[str, str]] = {
    c.IAM_ROLE_POLICY_ATTACHMENT: {"role": "name", "policy_arn": "arn"},
    c.LAMBDA_FUNCTION: {"role": "arn"},
    c.LAMBDA_EVENT_SOURCE_MAPPING: {"function_name": "arn", "event_source_arn": "arn"},
    c.APIGW_STAGE: {"api_id": "id"},
    c.APIGW_INTEGRATION: {"api_id": "id", "integration_uri": "invoke_arn"},
    c.APIGW_ROUTE: {"api_id": "id", "target": "id"},
    c.LAMBDA_PERMISSION: {"function": "name", "source_arn": "execution_arn"},
    c.S3_BUCKET_VERSIONING: {"bucket": "id"},
}

FALLBACK_REF_FIELDS = ("arn", "id")

OUTPUT_TEMPLATE = re.compile(r"^\$\{(.+?)\.(.+?)\}$")

_MISSING = object()

LiveRegistry = Dict[str, Any]


def _read(live: Any, field: str) -> Any:
    return getattr(live, field, _MISSING)


def resolve_ref(
    target: str,
    property_name: str,
    resource_type: str,
    registry: Mapping[str, Any],
) -> Any:
    """Read the referenced attribute off an already-constructed resource.

    Raises:
        LinkError: When the referenced resource or attribute is missing
    """
    resource_name, _, explicit_field = target.partition(".")
    live = registry.get(resource_name, _MISSING)
    if live is _MISSING:
        raise LinkError(
            f'Unresolved ref "{target}"',
            {"resource_type": resource_type, "property": property_name},
        )

    if explicit_field:
        candidates: tuple[str, ...] = (explicit_field,)
    else:
        default = DEFAULT_REF_FIELDS.get(resource_type, {}).get(property_name)
        candidates = ((default,) if default else ()) + FALLBACK_REF_FIELDS

    for field in candidates:
        value = _read(live, field)
        if value is not _MISSING and value is not None:
            return value

    raise LinkError(
        f'Unresolved ref "{target}": no field {", ".join(candidates)} on resource "{resource_name}"',
        {"resource_type": resource_type, "property": property_name},
    )


def resolve_value(value: Any, property_name: str, resource_type: str, registry: Mapping[str, Any]) -> Any:
    ref = as_ref(value)
    if ref is not None:
        return resolve_ref(ref.target, property_name, resource_type, registry)
    if isinstance(value, SecretRef):
        # Secret markers have no provider serialisation; the run will reject them
        logger.warning(
            "secret_ref_passthrough",
            secret_ref=value.secret_ref,
            property=property_name,
            resource_type=resource_type,
        )
        return value
    if isinstance(value, Mapping):
        return {k: resolve_value(v, k, resource_type, registry) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [resolve_value(item, property_name, resource_type, registry) for item in value]
    return value


def resolve_properties(
    properties: Mapping[str, Any],
    resource_type: str,
    registry: Mapping[str, Any],
) -> Dict[str, Any]:
    """Replace every ref in ``properties``, recursing into nested maps and lists."""
    return {key: resolve_value(value, key, resource_type, registry) for key, value in properties.items()}


def resolve_outputs(outputs: Mapping[str, str], registry: Mapping[str, Any]) -> Dict[str, Any]:
    """Resolve ``${name.field}`` output templates against the constructed resources."""
    resolved: Dict[str, Any] = {}
    for key, template in outputs.items():
        match = OUTPUT_TEMPLATE.match(template)
        if match is None:
            resolved[key] = template
            continue

        resource_name, field = match.group(1), match.group(2)
        live = registry.get(resource_name, _MISSING)
        if live is _MISSING:
            raise LinkError(
                f'Unresolved output "{key}": resource "{resource_name}" was not constructed',
                {"output": key, "resource": resource_name, "field": field},
            )
        value = _read(live, field)
        if value is _MISSING:
            raise LinkError(
                f'Unresolved output "{key}": field "{field}" does not exist on resource "{resource_name}"',
                {"output": key, "resource": resource_name, "field": field},
            )
        resolved[key] = value
    return resolved


def create_program(
    plan: ResourcePlan,
    config: AdapterConfig,
    constructors: Optional[Mapping[str, ResourceConstructor]] = None,
) -> Callable[[], Dict[str, Any]]:
    """Create the executor for ``plan``.

    Args:
        plan: Topologically ordered resource plan
        config: Adapter configuration for the target stack
        constructors: Resource type -> constructor table (defaults to pulumi_aws)

    Returns:
        Zero-argument callable that constructs every resource and returns
        the stack outputs. Each call builds into a fresh registry.
    """
    table = constructors if constructors is not None else default_constructors()

    def execute() -> Dict[str, Any]:
        registry: LiveRegistry = {}

        for resource in plan.resources:
            construct = table.get(resource.resource_type)
            if construct is None:
                logger.warning(
                    "unknown_resource_type",
                    resource=resource.name,
                    resource_type=resource.resource_type,
                    service=config.service_name,
                )
                continue

            properties = resolve_properties(resource.properties, resource.resource_type, registry)
            depends_on = [registry[name] for name in resource.depends_on if name in registry]
            opts = pulumi.ResourceOptions(depends_on=depends_on) if depends_on else None

            registry[resource.name] = construct(resource.name, properties, opts)
            logger.debug("resource_constructed", resource=resource.name, resource_type=resource.resource_type)

        return resolve_outputs(plan.outputs, registry)

    return execute


def pulumi_program(
    plan: ResourcePlan,
    config: AdapterConfig,
    constructors: Optional[Mapping[str, ResourceConstructor]] = None,
) -> Callable[[], None]:
    """Inline program for the Automation API: link the plan and export its outputs."""
    execute = create_program(plan, config, constructors)

    def program() -> None:
        for key, value in execute().items():
            pulumi.export(key, value)

    return program
