from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RuleResult:
    """
    Result of a single validation rule.

    informational:
        The rule ran but its outcome is not representative for this photo
        (e.g. the whiteness probe on a non-white background). It does not
        count towards the overall verdict.
    """
    rule_id: str
    passed: bool
    message: str
    metrics: dict[str, Any] | None = None
    informational: bool = False


@dataclass(frozen=True)
class ValidationReport:
    """
    Collection of validation rule results for a composed photo.
    """
    passed: bool
    results: list[RuleResult]
