"""Checks that lowered resources never carry live provider handles."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Iterable

from graphstack.lowering.constants import LAMBDA_BASIC_EXECUTION_POLICY_ARN
from graphstack.lowering.types import LoweredResource, to_plain

# arn:partition:service:region:<12-digit account>:...
ACCOUNT_ARN_PATTERN = re.compile(r"arn:aws[a-z-]*:[a-z0-9-]+:[a-z0-9-]*:\d{12}:[^\s\"']*")

ALLOWED_ARNS: frozenset[str] = frozenset({LAMBDA_BASIC_EXECUTION_POLICY_ARN})


@dataclass(frozen=True)
class ArnLeak:
    resource_name: str
    value: str


def find_arn_leaks(resources: Iterable[LoweredResource]) -> list[ArnLeak]:
    """Return every account-qualified ARN found in resource properties."""
    leaks: list[ArnLeak] = []
    for resource in resources:
        serialized = json.dumps(to_plain(resource.properties), sort_keys=True)
        for match in ACCOUNT_ARN_PATTERN.finditer(serialized):
            if match.group(0) not in ALLOWED_ARNS:
                leaks.append(ArnLeak(resource_name=resource.name, value=match.group(0)))
    return leaks
