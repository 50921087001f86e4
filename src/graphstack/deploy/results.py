"""Result, event and option types for deploy and preview runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Union

from graphstack.lowering.types import RetriableReason

ErrorCategory = Literal["aws-credentials", "stack-conflict", "timeout", "pulumi-runtime", "unknown"]


class EventType(StrEnum):
    STACK_CREATING = "stack-creating"
    STACK_CONFIGURING = "stack-configuring"
    DEPLOYING = "deploying"
    PREVIEWING = "previewing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ErrorDetail:
    """Classified deployment failure."""

    code: str
    category: ErrorCategory
    message: str
    source: str
    retryable: bool
    retriable_reason: Optional[RetriableReason] = None
    original: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "category": self.category,
            "message": self.message,
            "source": self.source,
            "retryable": self.retryable,
        }
        if self.retriable_reason is not None:
            data["retriable_reason"] = self.retriable_reason
        return data


@dataclass(frozen=True)
class DeployEvent:
    """Progress notification; every event carries the stack name."""

    type: EventType
    stack_name: str
    error: Optional[ErrorDetail] = None


EventCallback = Callable[[DeployEvent], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class DeployOptions:
    stack_name: Optional[str] = None
    project_name: Optional[str] = None
    on_output: Optional[Callable[[str], Any]] = None
    on_event: Optional[EventCallback] = None
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class DeploySummary:
    resource_changes: Optional[Mapping[str, int]] = None


@dataclass(frozen=True)
class DeployResult:
    success: bool
    stack_name: str
    outputs: Mapping[str, Any] = field(default_factory=dict)
    summary: DeploySummary = field(default_factory=DeploySummary)
    error: Optional[str] = None
    error_detail: Optional[ErrorDetail] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "stack_name": self.stack_name,
            "outputs": dict(self.outputs),
            "summary": {},
        }
        if self.summary.resource_changes is not None:
            data["summary"]["resource_changes"] = dict(self.summary.resource_changes)
        if self.error is not None:
            data["error"] = self.error
        if self.error_detail is not None:
            data["error_detail"] = self.error_detail.to_dict()
        return data


@dataclass(frozen=True)
class PreviewResult:
    success: bool
    stack_name: str
    change_summary: Optional[Mapping[str, int]] = None
    error: Optional[str] = None
    error_detail: Optional[ErrorDetail] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "stack_name": self.stack_name}
        if self.change_summary is not None:
            data["change_summary"] = dict(self.change_summary)
        if self.error is not None:
            data["error"] = self.error
        if self.error_detail is not None:
            data["error_detail"] = self.error_detail.to_dict()
        return data
