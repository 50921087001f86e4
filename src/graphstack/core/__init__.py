"""Core definitions shared across the lowering, linking and deploy layers."""

from graphstack.core.errors import (
    ConfigurationError,
    DeploymentError,
    GraphstackError,
    LinkError,
    LoweringError,
    RegistryError,
    format_error_message,
)

__all__ = [
    "ConfigurationError",
    "DeploymentError",
    "GraphstackError",
    "LinkError",
    "LoweringError",
    "RegistryError",
    "format_error_message",
]
