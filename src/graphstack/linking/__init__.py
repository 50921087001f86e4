"""Linking: resolve plan refs and construct Pulumi resources."""

from graphstack.linking.constructors import (
    SHAPE_ADAPTERS,
    UNTAGGED_TYPES,
    ResourceConstructor,
    adapt_properties,
    default_constructors,
)
from graphstack.linking.program import (
    DEFAULT_REF_FIELDS,
    create_program,
    pulumi_program,
    resolve_outputs,
    resolve_properties,
    resolve_ref,
    resolve_value,
)

__all__ = [
    "DEFAULT_REF_FIELDS",
    "ResourceConstructor",
    "SHAPE_ADAPTERS",
    "UNTAGGED_TYPES",
    "adapt_properties",
    "create_program",
    "default_constructors",
    "pulumi_program",
    "resolve_outputs",
    "resolve_properties",
    "resolve_ref",
    "resolve_value",
]
