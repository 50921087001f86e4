"""
Naming and tagging conventions for lowered resources.

Every resource name is derived from the graph node's short name so that
identical graphs always produce identical plans.
"""

from __future__ import annotations

TAG_PREFIX = "graphstack"

NODE_TAG = f"{TAG_PREFIX}:node"
PLATFORM_TAG = f"{TAG_PREFIX}:platform"
EDGE_TAG = f"{TAG_PREFIX}:edge"
PRINCIPAL_TAG = f"{TAG_PREFIX}:principal"
RESOURCE_TAG = f"{TAG_PREFIX}:resource"
TARGET_TAG = f"{TAG_PREFIX}:target"
KEY_TAG = f"{TAG_PREFIX}:key"


def short_name(node_ref: str) -> str:
    """
    Extract the short name from a graph node id.

    The node kind is everything before the first colon.
    Example: "component:api-handler" -> "api-handler"
    """
    _, sep, rest = node_ref.partition(":")
    return rest if sep else node_ref


def resource_name(node_ref: str, kind: str) -> str:
    """
    Get the planned resource name for a node.

    Pattern: {short_name}-{kind}
    Example: ("platform:work-queue", "queue") -> "work-queue-queue"
    """
    return f"{short_name(node_ref)}-{kind}"


def physical_name(service_name: str, node_ref: str) -> str:
    """Provider-side name: {service}-{short_name}."""
    return f"{service_name}-{short_name(node_ref)}"


def exec_role_name(node_ref: str) -> str:
    return resource_name(node_ref, "exec-role")


def node_tags(node_id: str, platform: str) -> dict[str, str]:
    """Traceability tags stamped on every node-derived resource."""
    return {NODE_TAG: node_id, PLATFORM_TAG: platform}


def edge_tags(edge_id: str) -> dict[str, str]:
    return {EDGE_TAG: edge_id}
