"""
Observability Module - Data Evaluation Prometheus Metrics and Audit Log
"""

from data_admission.observability.evaluation_metrics import (
    DATA_EVALUATIONS,
    DATA_DISALLOWED_REASONS,
    DATA_ALLOWED_REASONS,
    record_evaluation_metrics,
    log_evaluation_audit,
    publish_evaluation,
)

__all__ = [
    "DATA_EVALUATIONS",
    "DATA_DISALLOWED_REASONS",
    "DATA_ALLOWED_REASONS",
    "record_evaluation_metrics",
    "log_evaluation_audit",
    "publish_evaluation",
]
