"""
============================================================================
Data Admission Control - Evaluation Metrics and Audit Log
============================================================================

Reliability Level: L6 Critical
Input Constraints: A finished DataEvaluation
Side Effects: Updates Prometheus metrics registry, writes audit log

METRICS EXPOSED
---------------
- data_evaluations_total: Evaluations by trigger and outcome
- data_disallowed_reasons_total: Disallowed reasons by severity
- data_allowed_reasons_total: Retained allowed reasons

Metric failures are logged with OBS-xxx codes and never reach the caller.

============================================================================
"""

import logging
from typing import Optional

from prometheus_client import Counter

from data_admission.evaluation_config import DataEvaluationConfig, get_data_eval_config
from data_admission.logic.data_evaluation import DataEvaluation, sort_disallowed_reasons

# Configure module logger
logger = logging.getLogger(__name__)

# Dedicated audit logger for finished evaluations
audit_logger = logging.getLogger("data_admission.audit")


# ============================================================================
# CONSTANTS
# ============================================================================

OUTCOME_ALLOWED = "ALLOWED"
OUTCOME_DISALLOWED = "DISALLOWED"

SEVERITY_HARD = "HARD"
SEVERITY_SOFT = "SOFT"


# ============================================================================
# PROMETHEUS METRICS DEFINITIONS
# ============================================================================

DATA_EVALUATIONS = Counter(
    "data_evaluations_total",
    "Total number of finished data evaluations",
    ["evaluation_reason", "outcome"]
)

DATA_DISALLOWED_REASONS = Counter(
    "data_disallowed_reasons_total",
    "Disallowed reasons present in finished data evaluations",
    ["reason", "severity"]
)

DATA_ALLOWED_REASONS = Counter(
    "data_allowed_reasons_total",
    "Allowed reasons retained by finished data evaluations",
    ["reason"]
)


# ============================================================================
# METRIC UPDATE FUNCTIONS
# ============================================================================

def record_evaluation_metrics(evaluation: DataEvaluation) -> None:
    """
    Record counters for a finished evaluation.

    Reliability Level: L6 Critical
    Input Constraints: Finished DataEvaluation
    Side Effects: Increments Prometheus counters
    """
    try:
        allowed = evaluation.is_data_allowed()
        outcome = OUTCOME_ALLOWED if allowed else OUTCOME_DISALLOWED
        DATA_EVALUATIONS.labels(
            evaluation_reason=evaluation.evaluation_reason.value,
            outcome=outcome
        ).inc()

        if allowed:
            DATA_ALLOWED_REASONS.labels(reason=evaluation.data_allowed_reason.value).inc()
        else:
            for reason in sort_disallowed_reasons(set(evaluation.data_disallowed_reasons)):
                severity = SEVERITY_HARD if reason.is_hard else SEVERITY_SOFT
                DATA_DISALLOWED_REASONS.labels(reason=reason.value, severity=severity).inc()

        logger.debug(
            "Metric: data_evaluation | evaluation_reason=%s | outcome=%s",
            evaluation.evaluation_reason.value, outcome
        )
    except Exception as e:
        logger.error(
            "[OBS-001] Failed to record data_evaluation metrics | error=%s",
            str(e)
        )


def log_evaluation_audit(
    evaluation: DataEvaluation,
    config: Optional[DataEvaluationConfig] = None
) -> None:
    """
    Write the audit line for a finished evaluation.

    INFO when data is allowed, WARNING when disallowed.
    """
    tz = config.display_tz if config is not None else None
    record = evaluation.to_dict(tz)

    if evaluation.is_data_allowed():
        audit_logger.info(
            f"DATA_ALLOWED: Reason={record['data_allowed_reason']}",
            extra={"data_evaluation": record}
        )
    else:
        severity = SEVERITY_HARD if record["has_hard_disallowed_reason"] else SEVERITY_SOFT
        audit_logger.warning(
            f"DATA_DISALLOWED: Severity={severity} "
            f"Reasons={','.join(record['data_disallowed_reasons'])}",
            extra={"data_evaluation": record}
        )


def publish_evaluation(
    evaluation: DataEvaluation,
    config: Optional[DataEvaluationConfig] = None
) -> None:
    """
    Publish a finished evaluation to metrics and the audit log.

    Args:
        evaluation: The finished evaluation
        config: Publishing configuration (default: global config)
    """
    if config is None:
        config = get_data_eval_config()

    if config.metrics_enabled:
        record_evaluation_metrics(evaluation)

    if config.audit_log_enabled:
        log_evaluation_audit(evaluation, config)

    logger.debug(evaluation.describe(config.display_tz))


__all__ = [
    "DATA_EVALUATIONS",
    "DATA_DISALLOWED_REASONS",
    "DATA_ALLOWED_REASONS",
    "OUTCOME_ALLOWED",
    "OUTCOME_DISALLOWED",
    "SEVERITY_HARD",
    "SEVERITY_SOFT",
    "record_evaluation_metrics",
    "log_evaluation_audit",
    "publish_evaluation",
]
