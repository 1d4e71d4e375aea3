"""
Evaluation configuration for filterlang.

Limits and policies that hosts may want to tune without code changes are
read from environment variables:

    - FILTERLANG_MAX_DEPTH: maximum nesting depth of a parsed or evaluated
      expression (default 200)
    - FILTERLANG_VARIABLE_POLICY: what to do when a lookup answers with
      another variable; "reject" (default) or "follow"
    - FILTERLANG_MAX_RESOLUTION_HOPS: how many references "follow" may
      chase before giving up (default 8)

Usage:
    from filterlang.core.environment import get_config

    config = get_config()
    if config.variable_policy == VariablePolicy.FOLLOW:
        ...
"""

from __future__ import annotations

import logging
import os
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class VariablePolicy(StrEnum):
    """How the evaluator treats a lookup that returns a variable."""

    REJECT = "reject"
    FOLLOW = "follow"


DEFAULT_MAX_DEPTH = 200
DEFAULT_MAX_RESOLUTION_HOPS = 8

MAX_DEPTH_VAR = "FILTERLANG_MAX_DEPTH"
VARIABLE_POLICY_VAR = "FILTERLANG_VARIABLE_POLICY"
MAX_RESOLUTION_HOPS_VAR = "FILTERLANG_MAX_RESOLUTION_HOPS"


class EvaluationConfig(BaseModel):
    """Limits and policies applied while parsing and evaluating."""

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Nesting ceiling")
    variable_policy: VariablePolicy = Field(default=VariablePolicy.REJECT)
    max_resolution_hops: int = Field(default=DEFAULT_MAX_RESOLUTION_HOPS, ge=1)

    model_config = ConfigDict(frozen=True)


def _read_positive_int(var: str, default: int) -> int:
    raw = os.environ.get(var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning(
            "Invalid %s value '%s'. Expected a positive integer. Defaulting to %d.",
            var,
            raw,
            default,
        )
        return default
    return value


def get_variable_policy() -> VariablePolicy:
    """Get the variable resolution policy from FILTERLANG_VARIABLE_POLICY.

    Returns:
        VariablePolicy: REJECT unless the variable is set to "follow".

    Examples:
        >>> import os
        >>> os.environ["FILTERLANG_VARIABLE_POLICY"] = "follow"
        >>> get_variable_policy()
        <VariablePolicy.FOLLOW: 'follow'>
    """
    raw = os.environ.get(VARIABLE_POLICY_VAR, "").lower().strip()

    if raw == "" or raw == "reject":
        return VariablePolicy.REJECT
    elif raw == "follow":
        return VariablePolicy.FOLLOW
    else:
        logger.warning(
            "Unknown %s value '%s'. Valid values: reject, follow. Defaulting to reject.",
            VARIABLE_POLICY_VAR,
            raw,
        )
        return VariablePolicy.REJECT


def get_config() -> EvaluationConfig:
    """Build an EvaluationConfig from the environment."""
    return EvaluationConfig(
        max_depth=_read_positive_int(MAX_DEPTH_VAR, DEFAULT_MAX_DEPTH),
        variable_policy=get_variable_policy(),
        max_resolution_hops=_read_positive_int(
            MAX_RESOLUTION_HOPS_VAR, DEFAULT_MAX_RESOLUTION_HOPS
        ),
    )
