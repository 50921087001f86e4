"""
Deployment error classification.

Rules are applied in order to the failure message; the first match wins.
Anything unmatched is treated as a transient upstream failure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from graphstack.deploy.results import ErrorCategory, ErrorDetail
from graphstack.lowering.types import RetriableReason

DEFAULT_SOURCE = "aws-adapter"


@dataclass(frozen=True)
class ClassificationRule:
    pattern: re.Pattern[str]
    code: str
    category: ErrorCategory
    retryable: bool
    retriable_reason: Optional[RetriableReason] = None


def _rule(
    pattern: str,
    code: str,
    category: ErrorCategory,
    retryable: bool,
    retriable_reason: Optional[RetriableReason] = None,
) -> ClassificationRule:
    return ClassificationRule(re.compile(pattern, re.IGNORECASE), code, category, retryable, retriable_reason)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    _rule(
        r"expiredtoken|token (has |is )?expired|invalidclienttokenid|security token|"
        r"unable to locate credentials|no valid credential|could not load credentials|"
        r"credentials? (is |are )?(invalid|missing|expired)",
        "AUTH_FAILURE",
        "aws-credentials",
        False,
    ),
    _rule(
        r"conflict|already being updated|currently being updated|another update is (currently )?in progress",
        "CONFLICT",
        "stack-conflict",
        False,
    ),
    _rule(r"timed out|deadline exceeded", "UPSTREAM_TIMEOUT", "timeout", True, "upstream_timeout"),
    _rule(
        r"rate.?limit|throttl|too many requests|\b429\b",
        "RATE_LIMITED",
        "unknown",
        True,
        "rate_limit",
    ),
    _rule(
        r"plugin|language host|pulumi (cli|engine)|provisioning runtime|runtime error",
        "RUNNER_ERROR",
        "pulumi-runtime",
        False,
    ),
)

FALLBACK_RULE = ClassificationRule(
    pattern=re.compile(""),
    code="UPSTREAM_UNAVAILABLE",
    category="unknown",
    retryable=True,
    retriable_reason="dependency_unavailable",
)


def classify_error(error: object, *, source: str = DEFAULT_SOURCE) -> ErrorDetail:
    """Classify a deploy/preview failure into a structured ErrorDetail.

    Args:
        error: The raised exception, or any other failure value
        source: Component reported as the error source

    Returns:
        ErrorDetail; values that are not exceptions are ``UNKNOWN`` and
        never retryable
    """
    if not isinstance(error, BaseException):
        return ErrorDetail(
            code="UNKNOWN",
            category="unknown",
            message=str(error),
            source=source,
            retryable=False,
        )

    message = str(error) or type(error).__name__
    rule = next((r for r in CLASSIFICATION_RULES if r.pattern.search(message)), FALLBACK_RULE)
    return ErrorDetail(
        code=rule.code,
        category=rule.category,
        message=message,
        source=source,
        retryable=rule.retryable,
        retriable_reason=rule.retriable_reason,
        original=error,
    )
