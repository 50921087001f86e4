"""
Deploy and preview a ResourcePlan through the Pulumi Automation API.

Both entry points share one flow:

1. Derive stack and project names
2. Create or select the stack bound to the linked inline program
3. Set ``aws:region``
4. Run ``up`` or ``preview``, optionally raced against a timeout

The Automation API is blocking, so each call runs in a worker thread.
On timeout the worker is not cancelled; only its result is discarded.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Dict, Literal, Optional, Tuple

import structlog
from pulumi import automation as auto

from graphstack.config.settings import get_settings
from graphstack.core.errors import DeploymentError
from graphstack.deploy.errors import classify_error
from graphstack.deploy.results import (
    DeployEvent,
    DeployOptions,
    DeployResult,
    DeploySummary,
    ErrorDetail,
    EventType,
    PreviewResult,
)
from graphstack.domain.models import AdapterConfig
from graphstack.linking.program import pulumi_program
from graphstack.logging import bind_context
from graphstack.planning.generator import ResourcePlan

logger = structlog.get_logger()

Operation = Literal["deploy", "preview"]

REGION_CONFIG_KEY = "aws:region"


def build_stack_name(config: AdapterConfig, options: Optional[DeployOptions] = None) -> str:
    if options is not None and options.stack_name:
        return options.stack_name
    return f"{config.service_name}-{config.region}"


def build_project_name(config: AdapterConfig, options: Optional[DeployOptions] = None) -> str:
    if options is not None and options.project_name:
        return options.project_name
    return config.service_name


def _resolve_timeout(options: DeployOptions) -> Optional[float]:
    if options.timeout_seconds is not None:
        return options.timeout_seconds
    return get_settings().deploy_timeout_seconds


async def _with_timeout(call: Callable[[], Any], timeout: Optional[float]) -> Any:
    work = asyncio.to_thread(call)
    if timeout is None:
        return await work
    try:
        return await asyncio.wait_for(work, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise DeploymentError(f"Operation timed out after {timeout:g}s", {"timeout_seconds": timeout}) from exc


async def _emit(options: DeployOptions, event: DeployEvent) -> None:
    if options.on_event is None:
        return
    outcome = options.on_event(event)
    if inspect.isawaitable(outcome):
        await outcome


async def _run(
    operation: Operation,
    plan: ResourcePlan,
    config: AdapterConfig,
    options: DeployOptions,
) -> Tuple[str, Any, Optional[ErrorDetail]]:
    stack_name = build_stack_name(config, options)
    project_name = build_project_name(config, options)
    log = bind_context(
        operation=operation,
        stack_name=stack_name,
        project_name=project_name,
        trace_id=config.trace_id,
    )

    try:
        await _emit(options, DeployEvent(EventType.STACK_CREATING, stack_name))
        stack = await asyncio.to_thread(
            auto.create_or_select_stack,
            stack_name=stack_name,
            project_name=project_name,
            program=pulumi_program(plan, config),
        )

        await _emit(options, DeployEvent(EventType.STACK_CONFIGURING, stack_name))
        await asyncio.to_thread(stack.set_config, REGION_CONFIG_KEY, auto.ConfigValue(value=config.region))

        running = EventType.DEPLOYING if operation == "deploy" else EventType.PREVIEWING
        await _emit(options, DeployEvent(running, stack_name))
        log.info(f"{operation}_started", resources=len(plan.resources))

        method = stack.up if operation == "deploy" else stack.preview
        result = await _with_timeout(
            lambda: method(on_output=options.on_output),
            _resolve_timeout(options),
        )
    except Exception as exc:
        detail = classify_error(exc)
        log.error(
            f"{operation}_failed",
            error=detail.message,
            code=detail.code,
            category=detail.category,
            retryable=detail.retryable,
        )
        await _emit(options, DeployEvent(EventType.ERROR, stack_name, error=detail))
        return stack_name, None, detail

    log.info(f"{operation}_complete")
    await _emit(options, DeployEvent(EventType.COMPLETE, stack_name))
    return stack_name, result, None


def _flatten_outputs(outputs: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, output in (outputs or {}).items():
        flat[key] = getattr(output, "value", output)
    return flat


async def deploy(
    plan: ResourcePlan,
    config: AdapterConfig,
    options: Optional[DeployOptions] = None,
) -> DeployResult:
    """
    Apply a plan to its stack.

    Args:
        plan: Resource plan to link and deploy
        config: Adapter configuration (region, service name)
        options: Stack/project overrides, callbacks and timeout

    Returns:
        DeployResult; failures are classified and returned, never raised
    """
    options = options or DeployOptions()
    stack_name, result, detail = await _run("deploy", plan, config, options)
    if detail is not None:
        return DeployResult(success=False, stack_name=stack_name, error=detail.message, error_detail=detail)

    summary = getattr(result, "summary", None)
    changes = getattr(summary, "resource_changes", None)
    return DeployResult(
        success=True,
        stack_name=stack_name,
        outputs=_flatten_outputs(result.outputs),
        summary=DeploySummary(resource_changes=dict(changes) if changes else None),
    )


async def preview(
    plan: ResourcePlan,
    config: AdapterConfig,
    options: Optional[DeployOptions] = None,
) -> PreviewResult:
    """Dry-run a plan against its stack without changing remote state."""
    options = options or DeployOptions()
    stack_name, result, detail = await _run("preview", plan, config, options)
    if detail is not None:
        return PreviewResult(success=False, stack_name=stack_name, error=detail.message, error_detail=detail)

    changes = getattr(result, "change_summary", None)
    return PreviewResult(
        success=True,
        stack_name=stack_name,
        change_summary=dict(changes) if changes else None,
    )
