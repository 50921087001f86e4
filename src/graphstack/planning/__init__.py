"""Plan generation from lowered resources."""

from graphstack.planning.generator import (
    OUTPUT_MAP,
    PlannedResource,
    ResourcePlan,
    StackOutput,
    generate_plan,
    topological_sort,
)

__all__ = [
    "OUTPUT_MAP",
    "PlannedResource",
    "ResourcePlan",
    "StackOutput",
    "generate_plan",
    "topological_sort",
]
