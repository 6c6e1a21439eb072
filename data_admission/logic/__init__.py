"""
Logic Layer - Data Evaluation Record and Aggregate Verdict
"""

from data_admission.logic.data_evaluation import (
    DataEvaluationReason,
    DataDisallowedReason,
    DataAllowedReason,
    DISALLOWED_REASON_IS_HARD,
    ALLOWED_REASON_PRIORITY,
    DataProfileRef,
    DataEvaluation,
    format_evaluation_time,
)

from data_admission.logic.evaluation_verdict import (
    AggregateVerdict,
    resolve_aggregate_verdict,
)

__all__ = [
    "DataEvaluationReason",
    "DataDisallowedReason",
    "DataAllowedReason",
    "DISALLOWED_REASON_IS_HARD",
    "ALLOWED_REASON_PRIORITY",
    "DataProfileRef",
    "DataEvaluation",
    "format_evaluation_time",
    "AggregateVerdict",
    "resolve_aggregate_verdict",
]
