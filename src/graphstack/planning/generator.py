"""
Plan generation: AdapterResult -> dependency-ordered ResourcePlan.

The plan is the inspectable intermediate form of the Pulumi program; it
is built without touching the Pulumi runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from graphstack.domain.models import AdapterConfig
from graphstack.lowering import constants as c
from graphstack.lowering.types import AdapterResult, LoweredResource, to_plain


@dataclass(frozen=True)
class StackOutput:
    """One exported stack output: key suffix and provider attribute."""

    suffix: str
    field: str


OUTPUT_MAP: Dict[str, tuple[StackOutput, ...]] = {
    c.LAMBDA_FUNCTION: (StackOutput("arn", "arn"),),
    c.SQS_QUEUE: (StackOutput("url", "url"), StackOutput("arn", "arn")),
    c.IAM_ROLE: (StackOutput("arn", "arn"),),
    c.APIGW_API: (StackOutput("id", "id"), StackOutput("url", "api_endpoint")),
    c.DYNAMODB_TABLE: (StackOutput("name", "name"), StackOutput("arn", "arn")),
    c.S3_BUCKET: (StackOutput("bucket", "bucket"), StackOutput("arn", "arn")),
    c.SNS_TOPIC: (StackOutput("arn", "arn"),),
}


@dataclass(frozen=True)
class PlannedResource:
    """A LoweredResource without provenance, ready for linking."""

    name: str
    resource_type: str
    properties: Mapping[str, Any]
    depends_on: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "resource_type": self.resource_type,
            "properties": to_plain(self.properties),
            "depends_on": list(self.depends_on),
        }


@dataclass(frozen=True)
class ResourcePlan:
    """Topologically ordered resources plus ``${name.field}`` output templates."""

    resources: tuple[PlannedResource, ...]
    outputs: Mapping[str, str]

    @property
    def resource_names(self) -> List[str]:
        return [r.name for r in self.resources]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "outputs": dict(self.outputs),
        }


def output_template(resource_name: str, field: str) -> str:
    return "${" + f"{resource_name}.{field}" + "}"


def generate_plan(result: AdapterResult, config: AdapterConfig) -> ResourcePlan:
    """Build a deterministic plan from lowered resources.

    Args:
        result: Adapter output (resources already de-duplicated)
        config: Adapter configuration for the target stack

    Returns:
        ResourcePlan with dependencies ordered before dependents
    """
    planned: List[PlannedResource] = []
    outputs: Dict[str, str] = {}

    for resource in topological_sort(result.resources):
        planned.append(
            PlannedResource(
                name=resource.name,
                resource_type=resource.resource_type,
                properties=resource.properties,
                depends_on=tuple(resource.depends_on),
            )
        )
        for output in OUTPUT_MAP.get(resource.resource_type, ()):
            outputs[f"{resource.name}-{output.suffix}"] = output_template(resource.name, output.field)

    return ResourcePlan(resources=tuple(planned), outputs=outputs)


def topological_sort(resources: Sequence[LoweredResource]) -> List[LoweredResource]:
    """Depth-first sort over ``depends_on``, seeded in alphabetical name order.

    Dependencies missing from ``resources`` are skipped.
    """
    by_name: Dict[str, LoweredResource] = {}
    for resource in resources:
        by_name.setdefault(resource.name, resource)

    visited: set[str] = set()
    ordered: List[LoweredResource] = []

    def visit(name: str) -> None:
        if name in visited:
            return
        visited.add(name)
        resource = by_name.get(name)
        if resource is None:
            return
        for dep in resource.depends_on:
            visit(dep)
        ordered.append(resource)

    for name in sorted(by_name):
        visit(name)

    return ordered
