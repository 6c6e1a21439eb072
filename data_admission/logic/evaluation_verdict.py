"""
Aggregate Evaluation Verdict - Order-Insensitive Resolution

Reliability Level: L6 Critical
Input Constraints: Closed enumerations only
Side Effects: Logging only

DataEvaluation lets the latest call between the disallow and allow families
win. This module is the separate whole-evaluation variant: it takes every
asserted fact of a cycle at once and resolves a verdict that does not depend
on the order the rules were checked in.

RESOLUTION ORDER
----------------
1. Any hard disallowed reason -> DISALLOWED
2. Soft disallowed reasons + strongest allowed reason above NORMAL -> ALLOWED
   (soft reasons reported as overridden)
3. Soft disallowed reasons -> DISALLOWED
4. Otherwise -> ALLOWED with the strongest asserted allowed reason

Python 3.8 Compatible - No union type hints (X | None)
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional
import logging

from data_admission.logic.data_evaluation import (
    DataAllowedReason,
    DataDisallowedReason,
    DataEvaluation,
    DataEvaluationReason,
    sort_disallowed_reasons,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Allowed reasons strictly above this rank override soft disallowed reasons
SOFT_OVERRIDE_THRESHOLD = DataAllowedReason.NORMAL


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class AggregateVerdict:
    """
    Immutable whole-evaluation verdict.

    Attributes:
        data_allowed: Final decision
        disallowed_reasons: Reasons still blocking data (empty when allowed)
        allowed_reason: Retained allowed reason (NONE when disallowed)
        overridden_reasons: Soft reasons overridden by a strong allowed reason
    """
    data_allowed: bool
    disallowed_reasons: FrozenSet[DataDisallowedReason]
    allowed_reason: DataAllowedReason
    overridden_reasons: FrozenSet[DataDisallowedReason]

    @property
    def has_hard_disallowed_reasons(self) -> bool:
        return any(reason.is_hard for reason in self.disallowed_reasons)

    def to_evaluation(
        self,
        reason: DataEvaluationReason,
        candidate_data_profile: Optional[Any] = None
    ) -> DataEvaluation:
        """
        Replay the verdict into a DataEvaluation record for display/audit.

        Disallowed reasons are added after the allowed reason so the record
        ends in the same state as the verdict.
        """
        evaluation = DataEvaluation(reason)
        if self.allowed_reason is not DataAllowedReason.NONE:
            evaluation.add_data_allowed_reason(self.allowed_reason)
        for disallowed in sort_disallowed_reasons(set(self.disallowed_reasons)):
            evaluation.add_data_disallowed_reason(disallowed)
        if candidate_data_profile is not None:
            evaluation.set_candidate_data_profile(candidate_data_profile)
        return evaluation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_allowed": self.data_allowed,
            "disallowed_reasons": [
                r.value for r in sort_disallowed_reasons(set(self.disallowed_reasons))
            ],
            "allowed_reason": self.allowed_reason.value,
            "overridden_reasons": [
                r.value for r in sort_disallowed_reasons(set(self.overridden_reasons))
            ],
        }


# =============================================================================
# RESOLUTION
# =============================================================================

def strongest_allowed_reason(reasons: Iterable[DataAllowedReason]) -> DataAllowedReason:
    """Highest priority reason in reasons, or NONE if empty."""
    strongest = DataAllowedReason.NONE
    for reason in reasons:
        if reason.priority > strongest.priority:
            strongest = reason
    return strongest


def resolve_aggregate_verdict(
    disallowed_reasons: Iterable[DataDisallowedReason],
    allowed_reasons: Iterable[DataAllowedReason]
) -> AggregateVerdict:
    """
    Resolve a verdict from every fact asserted in one evaluation cycle.

    Reliability Level: L6 Critical
    Input Constraints: Closed enumerations
    Side Effects: Debug logging

    Args:
        disallowed_reasons: All disallowed reasons found by the rule checklist
        allowed_reasons: All allowed reasons asserted by the rule checklist

    Returns:
        AggregateVerdict independent of assertion order
    """
    disallowed = frozenset(disallowed_reasons)
    strongest = strongest_allowed_reason(allowed_reasons)
    hard = frozenset(r for r in disallowed if r.is_hard)

    if hard:
        verdict = AggregateVerdict(
            data_allowed=False,
            disallowed_reasons=disallowed,
            allowed_reason=DataAllowedReason.NONE,
            overridden_reasons=frozenset(),
        )
    elif disallowed and strongest.priority > SOFT_OVERRIDE_THRESHOLD.priority:
        verdict = AggregateVerdict(
            data_allowed=True,
            disallowed_reasons=frozenset(),
            allowed_reason=strongest,
            overridden_reasons=disallowed,
        )
    elif disallowed:
        verdict = AggregateVerdict(
            data_allowed=False,
            disallowed_reasons=disallowed,
            allowed_reason=DataAllowedReason.NONE,
            overridden_reasons=frozenset(),
        )
    else:
        verdict = AggregateVerdict(
            data_allowed=True,
            disallowed_reasons=frozenset(),
            allowed_reason=strongest,
            overridden_reasons=frozenset(),
        )

    logger.debug("Aggregate verdict resolved", extra={"verdict": verdict.to_dict()})
    return verdict


__all__ = [
    "SOFT_OVERRIDE_THRESHOLD",
    "AggregateVerdict",
    "strongest_allowed_reason",
    "resolve_aggregate_verdict",
]
