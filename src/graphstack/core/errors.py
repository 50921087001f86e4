"""
Exception hierarchy for graphstack.

Lowering errors are raised by individual lowerers and captured by the
adapter as diagnostics. Link errors escape the program executor and are
classified by the deployer. Nothing in the pipeline exits the process.
"""

from __future__ import annotations

from typing import Any


class GraphstackError(Exception):
    """Base exception for graphstack errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GraphstackError):
    """Raised for invalid adapter or deploy configuration."""


class LoweringError(GraphstackError):
    """Raised by a lowerer when its intent or node input is malformed."""


class RegistryError(GraphstackError):
    """Raised when a node lowerer would shadow an existing registration."""


class LinkError(GraphstackError):
    """Raised when a plan cannot be linked against constructed resources."""


class DeploymentError(GraphstackError):
    """Raised inside the deployer for failures it synthesises (e.g. timeouts)."""


def format_error_message(error: GraphstackError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in sorted(error.details.items()))
        msg = f"{msg} ({detail_str})"
    return msg
