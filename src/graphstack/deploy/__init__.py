"""Deploy and preview resource plans with the Pulumi Automation API."""

from graphstack.deploy.deployer import build_project_name, build_stack_name, deploy, preview
from graphstack.deploy.errors import CLASSIFICATION_RULES, classify_error
from graphstack.deploy.results import (
    DeployEvent,
    DeployOptions,
    DeployResult,
    DeploySummary,
    ErrorDetail,
    EventType,
    PreviewResult,
)

__all__ = [
    "CLASSIFICATION_RULES",
    "DeployEvent",
    "DeployOptions",
    "DeployResult",
    "DeploySummary",
    "ErrorDetail",
    "EventType",
    "PreviewResult",
    "build_project_name",
    "build_stack_name",
    "classify_error",
    "deploy",
    "preview",
]
