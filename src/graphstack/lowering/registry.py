"""Node lowerer registry keyed by platform tag."""

from __future__ import annotations

from typing import Dict, List, Optional

from graphstack.core.errors import RegistryError
from graphstack.lowering.nodes import (
    ApiGatewayLowerer,
    DynamoDbLowerer,
    LambdaLowerer,
    S3Lowerer,
    SnsLowerer,
    SqsLowerer,
)
from graphstack.lowering.types import NodeLowerer


class NodeLowererRegistry:
    """In-memory registry for node lowerers."""

    def __init__(self) -> None:
        self._lowerers: Dict[str, NodeLowerer] = {}

    def register(self, lowerer: NodeLowerer, *, overwrite: bool = False) -> None:
        """Register a lowerer by its platform.

        Raises RegistryError when the platform is taken, unless ``overwrite``.
        """
        platform = lowerer.platform
        if not platform:
            raise RegistryError("Node lowerer platform is required")
        if platform in self._lowerers and not overwrite:
            raise RegistryError(
                f"Node lowerer already registered for platform '{platform}'",
                {"platform": platform},
            )
        self._lowerers[platform] = lowerer

    def get(self, platform: str) -> Optional[NodeLowerer]:
        """Get the lowerer for a platform."""
        return self._lowerers.get(platform)

    def list(self) -> List[NodeLowerer]:
        """All lowerers, sorted by platform name."""
        return [self._lowerers[p] for p in sorted(self._lowerers)]

    def platforms(self) -> List[str]:
        return sorted(self._lowerers)

    def __contains__(self, platform: object) -> bool:
        return platform in self._lowerers


def _builtin_node_lowerers() -> List[NodeLowerer]:
    return [
        LambdaLowerer(),
        SqsLowerer(),
        DynamoDbLowerer(),
        S3Lowerer(),
        ApiGatewayLowerer(),
        SnsLowerer(),
    ]


def create_default_registry() -> NodeLowererRegistry:
    """Registry pre-populated with every built-in node lowerer."""
    registry = NodeLowererRegistry()
    for lowerer in _builtin_node_lowerers():
        registry.register(lowerer)
    return registry


# Static lookup list kept behind Settings.node_lowerer_lookup="legacy" as a rollback path
LEGACY_NODE_LOWERERS: tuple[NodeLowerer, ...] = tuple(_builtin_node_lowerers())


def find_legacy_lowerer(platform: str) -> Optional[NodeLowerer]:
    """Linear scan of the static lowerer list."""
    for lowerer in LEGACY_NODE_LOWERERS:
        if lowerer.platform == platform:
            return lowerer
    return None
