"""
Adapter orchestrator: intents + graph snapshot -> AdapterResult.

Phases, in order:
1. Lower intents (network intents warn, telemetry is skipped silently)
2. Resolve per-node dependencies (exec role, environment variables)
3. Lower platform-tagged nodes
4. Synthesize Lambda <- SQS event source mappings from ``bindsTo`` edges
5. Synthesize API Gateway -> Lambda integrations from ``triggers`` edges
6. De-duplicate by name (first wins) and sort by name

Every lowerer call is isolated: an exception becomes an error diagnostic
and the remaining intents and nodes still lower.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

import structlog

from graphstack.config.settings import NodeLowererLookup, get_settings
from graphstack.core.errors import ConfigurationError
from graphstack.domain.models import ConfigIntent, GraphNode, IamIntent
from graphstack.lowering.constants import (
    APIGATEWAY_PLATFORM,
    APIGW_INTEGRATION,
    APIGW_ROUTE,
    LAMBDA_EVENT_SOURCE_MAPPING,
    LAMBDA_PERMISSION,
    LAMBDA_PLATFORM,
    SQS_PLATFORM,
)
from graphstack.lowering.intents import DEFAULT_INTENT_LOWERERS
from graphstack.lowering.naming import edge_tags, exec_role_name, resource_name, short_name
from graphstack.lowering.references import resolve_config_value
from graphstack.lowering.registry import (
    NodeLowererRegistry,
    create_default_registry,
    find_legacy_lowerer,
)
from graphstack.lowering.types import (
    AdapterResult,
    Diagnostic,
    IntentLowerer,
    LoweredResource,
    LoweringContext,
    NodeLowerer,
    Ref,
    ResolvedDeps,
)

logger = structlog.get_logger()

EVENT_MAPPING_BATCH_SIZE = 10

PHASES: Tuple[str, ...] = ("intents", "nodes", "event-mappings", "integrations", "complete")

PhaseCallback = Callable[[str], Union[None, Awaitable[None]]]

# A lowerer invocation yields either its resources or a diagnostic, never both
LowerOutcome = Tuple[List[LoweredResource], Optional[Diagnostic]]


def _invoke(
    call: Callable[[], Sequence[LoweredResource]],
    lowerer: Any,
    source_id: str,
) -> LowerOutcome:
    lowerer_name = type(lowerer).__name__
    try:
        return list(call()), None
    except Exception as e:
        logger.warning("lowerer_failed", lowerer=lowerer_name, source_id=source_id, err=str(e))
        return [], Diagnostic(
            severity="error",
            message=f"{lowerer_name} failed: {e}",
            source_id=source_id,
            code="LOWERER_FAILED",
            retriable=False,
        )


class _LoweringRun:
    """State for one lowering pass. Not shared across passes."""

    def __init__(
        self,
        context: LoweringContext,
        lookup: NodeLowererLookup,
        registry: NodeLowererRegistry,
        intent_lowerers: Sequence[IntentLowerer],
    ) -> None:
        self.context = context
        self.lookup = lookup
        self.registry = registry
        self.intent_lowerers: Dict[str, IntentLowerer] = {
            lowerer.intent_type: lowerer for lowerer in intent_lowerers
        }
        self.nodes: Dict[str, GraphNode] = {n.id: n for n in context.snapshot.nodes}
        self.resources: List[LoweredResource] = []
        self.diagnostics: List[Diagnostic] = []
        self.resource_map: Dict[str, List[str]] = {}
        self.node_deps: Dict[str, ResolvedDeps] = {}

    # --- bookkeeping -----------------------------------------------------

    def _collect(self, source_id: str, outcome: LowerOutcome) -> None:
        resources, diagnostic = outcome
        if diagnostic is not None:
            self.diagnostics.append(diagnostic)
            return
        self.resources.extend(resources)
        self.resource_map.setdefault(source_id, []).extend(r.name for r in resources)

    def _warn(self, message: str, source_id: str, code: str) -> None:
        self.diagnostics.append(
            Diagnostic(severity="warning", message=message, source_id=source_id, code=code)
        )

    # --- phase 1 ---------------------------------------------------------

    def lower_intents(self) -> None:
        for intent in self.context.intents:
            intent_type = getattr(intent, "type", None)
            source_id = getattr(intent, "source_edge_id", "")

            if intent_type == "network":
                self._warn(
                    "Network intents are not supported by the AWS adapter; no resources emitted",
                    source_id,
                    "NETWORK_UNSUPPORTED",
                )
                continue

            lowerer = self.intent_lowerers.get(intent_type or "")
            if lowerer is None:
                if intent_type != "telemetry":
                    self._warn(
                        f"No lowerer for intent type '{intent_type}'",
                        source_id,
                        "NO_INTENT_LOWERER",
                    )
                continue

            self._collect(
                source_id,
                _invoke(lambda: lowerer.lower(intent, self.context), lowerer, source_id),
            )

    # --- phase 2 ---------------------------------------------------------

    def resolve_node_deps(self) -> None:
        self.node_deps = resolve_node_deps(self.context)

    # --- phase 3 ---------------------------------------------------------

    def _node_lowerer(self, platform: str) -> Optional[NodeLowerer]:
        if self.lookup == "legacy":
            return find_legacy_lowerer(platform)
        return self.registry.get(platform)

    def lower_nodes(self) -> None:
        for node in self.context.snapshot.nodes:
            platform = node.platform
            if platform is None:
                continue

            lowerer = self._node_lowerer(platform)
            if lowerer is None:
                self._warn(f"No lowerer for platform '{platform}'", node.id, "NO_NODE_LOWERER")
                continue

            deps = self.node_deps.get(node.id, ResolvedDeps())
            self._collect(
                node.id,
                _invoke(lambda: lowerer.lower(node, self.context, deps), lowerer, node.id),
            )

    # --- phases 4 and 5 --------------------------------------------------

    def _edge_endpoints(self, edge_type: str, source_platform: str, target_platform: str):
        for edge in self.context.snapshot.edges:
            if edge.type != edge_type:
                continue
            source = self.nodes.get(edge.source)
            target = self.nodes.get(edge.target)
            if source is None or target is None:
                continue
            if source.platform == source_platform and target.platform == target_platform:
                yield edge, source, target

    def synthesize_event_mappings(self) -> None:
        for edge, fn_node, queue_node in self._edge_endpoints(
            "bindsTo", LAMBDA_PLATFORM, SQS_PLATFORM
        ):
            function = resource_name(fn_node.id, "function")
            queue = resource_name(queue_node.id, "queue")
            mapping = LoweredResource(
                name=f"{short_name(fn_node.id)}-{short_name(queue_node.id)}-event-mapping",
                resource_type=LAMBDA_EVENT_SOURCE_MAPPING,
                properties={
                    "function_name": Ref(function),
                    "event_source_arn": Ref(queue),
                    "batch_size": EVENT_MAPPING_BATCH_SIZE,
                    "enabled": True,
                    "tags": edge_tags(edge.id),
                },
                source_id=edge.id,
                depends_on=(function, queue),
            )
            self._collect(edge.id, ([mapping], None))

    def synthesize_integrations(self) -> None:
        for edge, api_node, fn_node in self._edge_endpoints(
            "triggers", APIGATEWAY_PLATFORM, LAMBDA_PLATFORM
        ):
            api = resource_name(api_node.id, "api")
            function = resource_name(fn_node.id, "function")
            prefix = f"{short_name(api_node.id)}-{short_name(fn_node.id)}"
            integration = f"{prefix}-integration"

            self._collect(
                edge.id,
                (
                    [
                        LoweredResource(
                            name=integration,
                            resource_type=APIGW_INTEGRATION,
                            properties={
                                "api_id": Ref(api),
                                "integration_type": "AWS_PROXY",
                                "integration_uri": Ref(function),
                                "payload_format_version": "2.0",
                                "tags": edge_tags(edge.id),
                            },
                            source_id=edge.id,
                            depends_on=(api, function),
                        ),
                        LoweredResource(
                            name=f"{prefix}-route",
                            resource_type=APIGW_ROUTE,
                            properties={
                                "api_id": Ref(api),
                                "route_key": route_key(edge.binding_config),
                                "target": Ref(integration),
                                "tags": edge_tags(edge.id),
                            },
                            source_id=edge.id,
                            depends_on=(api, integration),
                        ),
                        LoweredResource(
                            name=f"{prefix}-permission",
                            resource_type=LAMBDA_PERMISSION,
                            properties={
                                "action": "lambda:InvokeFunction",
                                "function": Ref(function),
                                "principal": "apigateway.amazonaws.com",
                                "source_arn": Ref(api),
                                "tags": edge_tags(edge.id),
                            },
                            source_id=edge.id,
                            depends_on=(function, api),
                        ),
                    ],
                    None,
                ),
            )

    # --- phase 6 ---------------------------------------------------------

    def finalize(self) -> AdapterResult:
        seen: set[str] = set()
        deduped: List[LoweredResource] = []
        for resource in self.resources:
            if resource.name not in seen:
                seen.add(resource.name)
                deduped.append(resource)
        deduped.sort(key=lambda r: r.name)

        return AdapterResult(
            resources=tuple(deduped),
            resource_map={k: tuple(self.resource_map[k]) for k in sorted(self.resource_map)},
            diagnostics=tuple(self.diagnostics),
            success=not any(d.severity == "error" for d in self.diagnostics),
        )


def route_key(binding_config: Dict[str, Any]) -> str:
    """``"{METHOD} {path}"`` when both are configured, else ``"$default"``."""
    route = binding_config.get("route")
    method = binding_config.get("method")
    if route and method:
        return f"{method} {route}"
    return "$default"


def resolve_node_deps(context: LoweringContext) -> Dict[str, ResolvedDeps]:
    """Derive each node's exec role and environment from a single scan of the intents."""
    deps: Dict[str, ResolvedDeps] = {}
    for node in context.snapshot.nodes:
        role_name: Optional[str] = None
        env_vars: Dict[str, Any] = {}
        for intent in context.intents:
            if isinstance(intent, IamIntent) and intent.principal.node_ref == node.id:
                role_name = exec_role_name(node.id)
            elif isinstance(intent, ConfigIntent) and intent.target_node_ref == node.id:
                env_vars[intent.key] = resolve_config_value(intent, context.snapshot)
        deps[node.id] = ResolvedDeps(role_name=role_name, env_vars=env_vars)
    return deps


def _start_run(
    context: LoweringContext,
    lookup: Optional[NodeLowererLookup],
    registry: Optional[NodeLowererRegistry],
    intent_lowerers: Optional[Sequence[IntentLowerer]],
) -> _LoweringRun:
    mode = lookup or get_settings().node_lowerer_lookup
    if mode not in ("registry", "legacy"):
        raise ConfigurationError(f"Unknown node lowerer lookup '{mode}'", {"lookup": mode})
    return _LoweringRun(
        context,
        lookup=mode,
        registry=registry or create_default_registry(),
        intent_lowerers=DEFAULT_INTENT_LOWERERS if intent_lowerers is None else intent_lowerers,
    )


def lower(
    context: LoweringContext,
    *,
    lookup: Optional[NodeLowererLookup] = None,
    registry: Optional[NodeLowererRegistry] = None,
    intent_lowerers: Optional[Sequence[IntentLowerer]] = None,
) -> AdapterResult:
    """
    Lower a compilation result into AWS resources.

    Args:
        context: Intents, graph snapshot and adapter config
        lookup: "registry" or "legacy" node lowerer lookup; defaults to
            ``Settings.node_lowerer_lookup``
        registry: Node lowerer registry for the "registry" lookup
        intent_lowerers: Override the built-in intent lowerers

    Returns:
        AdapterResult with resources sorted by name
    """
    run = _start_run(context, lookup, registry, intent_lowerers)
    run.lower_intents()
    run.resolve_node_deps()
    run.lower_nodes()
    run.synthesize_event_mappings()
    run.synthesize_integrations()
    return run.finalize()


async def lower_async(
    context: LoweringContext,
    *,
    on_phase: Optional[PhaseCallback] = None,
    lookup: Optional[NodeLowererLookup] = None,
    registry: Optional[NodeLowererRegistry] = None,
    intent_lowerers: Optional[Sequence[IntentLowerer]] = None,
) -> AdapterResult:
    """Same algorithm as :func:`lower`, reporting each completed phase to ``on_phase``."""

    async def notify(phase: str) -> None:
        logger.debug("lowering_phase_complete", phase=phase)
        if on_phase is None:
            return
        outcome = on_phase(phase)
        if inspect.isawaitable(outcome):
            await outcome

    run = _start_run(context, lookup, registry, intent_lowerers)
    run.lower_intents()
    await notify("intents")
    run.resolve_node_deps()
    run.lower_nodes()
    await notify("nodes")
    run.synthesize_event_mappings()
    await notify("event-mappings")
    run.synthesize_integrations()
    await notify("integrations")
    result = run.finalize()
    await notify("complete")
    return result
