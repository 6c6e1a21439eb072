"""
============================================================================
Data Admission Control v1.0.0
Data Evaluation - Allow/Disallow Decision Record
============================================================================

Reliability Level: L6 Critical
Input Constraints: Closed enumerations only
Side Effects: Debug logging only

PURPOSE
-------
A DataEvaluation records the outcome of one evaluation cycle run by the
network request scheduler: whether a data network may be brought up, and why.
The scheduler constructs one record per cycle, calls the mutators while it
walks its rule checklist, then reads the final state through the queries.

MUTUAL EXCLUSIVITY (Last Writer Between Families)
-------------------------------------------------
- Adding a disallowed reason resets the allowed reason to NONE.
- Adding an allowed reason clears every disallowed reason.
- Within the allowed family only a strictly higher priority reason replaces
  the stored one (EMERGENCY_REQUEST survives a later NORMAL).

SEVERITY
--------
Soft disallowed reasons (user settings) may be overridden elsewhere.
Hard disallowed reasons must never be overridden.

Python 3.8 Compatible - No union type hints (X | None)
============================================================================
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

# Configure module logger
logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

# Debug timestamp layout (MM-dd HH:mm:ss.SSS). Digits only, locale independent.
EVALUATION_TIME_FORMAT = "%m-%d %H:%M:%S"

# Value of evaluated_time_ms before the first allow/disallow mutation
UNEVALUATED_TIME_MS = 0


# ============================================================================
# ENUMS
# ============================================================================

class DataEvaluationReason(Enum):
    """
    Why the scheduler started this evaluation cycle.

    Purely descriptive. Never participates in the allow/disallow decision.
    """
    # New request from the apps.
    NEW_REQUEST = "NEW_REQUEST"
    # Data config changed.
    DATA_CONFIG_CHANGED = "DATA_CONFIG_CHANGED"
    # SIM is loaded.
    SIM_LOADED = "SIM_LOADED"
    # Data profiles changed.
    DATA_PROFILES_CHANGED = "DATA_PROFILES_CHANGED"
    # Airplane mode off.
    AIRPLANE_MODE_OFF = "AIRPLANE_MODE_OFF"
    # Unsatisfied network requests might fit with the new RAT.
    DATA_RAT_CHANGED = "DATA_RAT_CHANGED"
    # Service state changed from out of service to in service.
    DATA_IN_SERVICE = "DATA_IN_SERVICE"
    # Data enabled by user, carrier, thermal, etc.
    DATA_ENABLED = "DATA_ENABLED"
    # Data roaming enabled.
    ROAMING_ENABLED = "ROAMING_ENABLED"
    # Voice call ended on a RAT without concurrent voice/data.
    VOICE_CALL_ENDED = "VOICE_CALL_ENDED"
    # Network no longer restricts mobile data.
    DATA_RESTRICTED_LIFTED = "DATA_RESTRICTED_LIFTED"
    # Network capabilities changed.
    DATA_NETWORK_CAPABILITIES_CHANGED = "DATA_NETWORK_CAPABILITIES_CHANGED"


class DataDisallowedReason(Enum):
    """
    Reasons data is not allowed. Several may be active at once.

    Severity is looked up in DISALLOWED_REASON_IS_HARD rather than derived
    from declaration order.
    """
    # Soft reasons
    DATA_DISABLED = "DATA_DISABLED"
    ROAMING_DISABLED = "ROAMING_DISABLED"
    DEFAULT_DATA_UNSELECTED = "DEFAULT_DATA_UNSELECTED"

    # Hard reasons
    NOT_IN_SERVICE = "NOT_IN_SERVICE"
    DATA_CONFIG_NOT_READY = "DATA_CONFIG_NOT_READY"
    SIM_NOT_READY = "SIM_NOT_READY"
    CONCURRENT_VOICE_DATA_NOT_ALLOWED = "CONCURRENT_VOICE_DATA_NOT_ALLOWED"
    DATA_RESTRICTED_BY_NETWORK = "DATA_RESTRICTED_BY_NETWORK"
    RADIO_POWER_OFF = "RADIO_POWER_OFF"
    INTERNAL_DATA_DISABLED = "INTERNAL_DATA_DISABLED"
    RADIO_DISABLED_BY_CARRIER = "RADIO_DISABLED_BY_CARRIER"
    DATA_SERVICE_NOT_READY = "DATA_SERVICE_NOT_READY"

    @property
    def is_hard(self) -> bool:
        """True if no policy exception may override this reason."""
        return DISALLOWED_REASON_IS_HARD[self]


class DataAllowedReason(Enum):
    """
    Reasons data is allowed. Only one is retained per evaluation.

    Priority is looked up in ALLOWED_REASON_PRIORITY. NONE is the initial
    sentinel and never asserted by the scheduler.
    """
    NONE = "NONE"
    # Most common case.
    NORMAL = "NORMAL"
    # Network is unmetered; allowed regardless of the user data setting.
    UNMETERED_USAGE = "UNMETERED_USAGE"
    # Only privileged apps can access the network.
    RESTRICTED_REQUEST = "RESTRICTED_REQUEST"
    # Emergency request. Highest priority.
    EMERGENCY_REQUEST = "EMERGENCY_REQUEST"

    @property
    def priority(self) -> int:
        """Rank of this reason; higher wins."""
        return ALLOWED_REASON_PRIORITY[self]


# ============================================================================
# REASON METADATA
# ============================================================================

# Severity per disallowed reason. True = hard.
DISALLOWED_REASON_IS_HARD: Dict[DataDisallowedReason, bool] = {
    DataDisallowedReason.DATA_DISABLED: False,
    DataDisallowedReason.ROAMING_DISABLED: False,
    DataDisallowedReason.DEFAULT_DATA_UNSELECTED: False,
    DataDisallowedReason.NOT_IN_SERVICE: True,
    DataDisallowedReason.DATA_CONFIG_NOT_READY: True,
    DataDisallowedReason.SIM_NOT_READY: True,
    DataDisallowedReason.CONCURRENT_VOICE_DATA_NOT_ALLOWED: True,
    DataDisallowedReason.DATA_RESTRICTED_BY_NETWORK: True,
    DataDisallowedReason.RADIO_POWER_OFF: True,
    DataDisallowedReason.INTERNAL_DATA_DISABLED: True,
    DataDisallowedReason.RADIO_DISABLED_BY_CARRIER: True,
    DataDisallowedReason.DATA_SERVICE_NOT_READY: True,
}

# Priority rank per allowed reason. Lowest -> highest.
ALLOWED_REASON_PRIORITY: Dict[DataAllowedReason, int] = {
    DataAllowedReason.NONE: 0,
    DataAllowedReason.NORMAL: 1,
    DataAllowedReason.UNMETERED_USAGE: 2,
    DataAllowedReason.RESTRICTED_REQUEST: 3,
    DataAllowedReason.EMERGENCY_REQUEST: 4,
}

_missing_severity = [r for r in DataDisallowedReason if r not in DISALLOWED_REASON_IS_HARD]
if _missing_severity:
    raise RuntimeError(
        f"Missing DISALLOWED_REASON_IS_HARD for: {[r.value for r in _missing_severity]}"
    )

_missing_priority = [r for r in DataAllowedReason if r not in ALLOWED_REASON_PRIORITY]
if _missing_priority:
    raise RuntimeError(
        f"Missing ALLOWED_REASON_PRIORITY for: {[r.value for r in _missing_priority]}"
    )

if len(set(ALLOWED_REASON_PRIORITY.values())) != len(ALLOWED_REASON_PRIORITY):
    raise RuntimeError("ALLOWED_REASON_PRIORITY ranks must be unique")


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class DataProfileRef:
    """
    Opaque handle to the candidate data profile.

    Supplied by the profile selection collaborator. Never validated or
    interpreted here; only stored, compared, and displayed.

    Attributes:
        profile_id: Identifier assigned by the profile provider
        display_name: Optional human-readable label (e.g. APN name)
    """
    profile_id: str
    display_name: Optional[str] = None

    def __str__(self) -> str:
        if self.display_name:
            return f"DataProfile[{self.profile_id}/{self.display_name}]"
        return f"DataProfile[{self.profile_id}]"


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def current_time_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_evaluation_time(time_ms: int, tz: Optional[tzinfo] = None) -> str:
    """
    Render an epoch-millisecond timestamp as MM-dd HH:mm:ss.SSS.

    Reliability Level: L6 Critical
    Input Constraints: time_ms is epoch milliseconds
    Side Effects: None

    Args:
        time_ms: Epoch milliseconds
        tz: Target timezone (default: local time)

    Returns:
        Formatted timestamp, e.g. "01-01 00:00:00.000"
    """
    seconds, millis = divmod(int(time_ms), 1000)
    moment = datetime.fromtimestamp(seconds, tz)
    return f"{moment.strftime(EVALUATION_TIME_FORMAT)}.{millis:03d}"


def sort_disallowed_reasons(reasons: Set[DataDisallowedReason]) -> List[DataDisallowedReason]:
    """Order disallowed reasons by declaration order for stable display."""
    return [reason for reason in DataDisallowedReason if reason in reasons]


# ============================================================================
# DATA EVALUATION
# ============================================================================

class DataEvaluation:
    """
    Outcome of one data evaluation cycle.

    Reliability Level: L6 Critical
    Input Constraints: Closed enumerations
    Side Effects: Debug logging

    Not thread safe. One record is owned by one evaluation cycle and
    discarded after it has been consumed.
    """

    def __init__(
        self,
        reason: DataEvaluationReason,
        clock: Optional[Callable[[], int]] = None
    ) -> None:
        """
        Args:
            reason: Why this evaluation cycle was started
            clock: Zero-argument callable returning epoch milliseconds
                   (default: wall clock)
        """
        self._evaluation_reason = reason
        self._data_disallowed_reasons: Set[DataDisallowedReason] = set()
        self._data_allowed_reason = DataAllowedReason.NONE
        self._candidate_data_profile: Optional[Any] = None
        self._evaluated_time_ms = UNEVALUATED_TIME_MS
        self._clock = clock or current_time_millis

    # ------------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------------

    def add_data_disallowed_reason(self, reason: DataDisallowedReason) -> None:
        """
        Add a disallowed reason. Clears the allowed reason since the two are
        mutually exclusive.
        """
        self._data_allowed_reason = DataAllowedReason.NONE
        self._data_disallowed_reasons.add(reason)
        self._evaluated_time_ms = self._clock()

        logger.debug(
            "Data disallowed reason added",
            extra={
                "evaluation_reason": self._evaluation_reason.value,
                "disallowed_reason": reason.value,
                "is_hard": reason.is_hard,
            }
        )

    def add_data_allowed_reason(self, reason: DataAllowedReason) -> None:
        """
        Add an allowed reason. Clears every disallowed reason since the two
        are mutually exclusive.

        Only a strictly higher priority reason replaces the stored one; the
        evaluation time is stamped either way.
        """
        self._data_disallowed_reasons.clear()

        if reason.priority > self._data_allowed_reason.priority:
            self._data_allowed_reason = reason
        self._evaluated_time_ms = self._clock()

        logger.debug(
            "Data allowed reason added",
            extra={
                "evaluation_reason": self._evaluation_reason.value,
                "asserted_reason": reason.value,
                "allowed_reason": self._data_allowed_reason.value,
            }
        )

    def set_candidate_data_profile(self, data_profile: Any) -> None:
        """Set the candidate data profile for setting up the data network."""
        self._candidate_data_profile = data_profile

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------

    @property
    def evaluation_reason(self) -> DataEvaluationReason:
        return self._evaluation_reason

    @property
    def data_disallowed_reasons(self) -> FrozenSet[DataDisallowedReason]:
        return frozenset(self._data_disallowed_reasons)

    @property
    def data_allowed_reason(self) -> DataAllowedReason:
        return self._data_allowed_reason

    @property
    def candidate_data_profile(self) -> Optional[Any]:
        """The candidate data profile, or None if not selected."""
        return self._candidate_data_profile

    @property
    def evaluated_time_ms(self) -> int:
        return self._evaluated_time_ms

    def is_data_allowed(self) -> bool:
        """True if there are no disallowed reasons."""
        return len(self._data_disallowed_reasons) == 0

    def contains_disallowed(self, reason: DataDisallowedReason) -> bool:
        """True if the given reason is one of the disallowed reasons."""
        return reason in self._data_disallowed_reasons

    def contains_only(self, reason: DataDisallowedReason) -> bool:
        """True if the given reason is the only one preventing data."""
        return len(self._data_disallowed_reasons) == 1 and self.contains_disallowed(reason)

    def contains_allowed(self, reason: DataAllowedReason) -> bool:
        """True if the given reason is the retained allowed reason."""
        return reason == self._data_allowed_reason

    def contains_hard_disallowed_reasons(self) -> bool:
        """True if any disallowed reason is hard."""
        return any(reason.is_hard for reason in self._data_disallowed_reasons)

    # ------------------------------------------------------------------------
    # Display / audit
    # ------------------------------------------------------------------------

    def describe(self, tz: Optional[tzinfo] = None) -> str:
        """
        Single-line debug summary.

        Args:
            tz: Timezone for the evaluation time (default: local time)

        Returns:
            Human-readable summary; not a parseable format
        """
        parts = [f"Data evaluation: evaluation reason:{self._evaluation_reason.value}, "]
        if self._data_disallowed_reasons:
            parts.append("Data disallowed reasons:")
            for reason in sort_disallowed_reasons(self._data_disallowed_reasons):
                parts.append(f" {reason.value}")
        else:
            parts.append(f"Data allowed reason: {self._data_allowed_reason.value}")
        parts.append(f", candidate profile={self._candidate_data_profile}")
        parts.append(f", time={format_evaluation_time(self._evaluated_time_ms, tz)}")
        return "".join(parts)

    def to_dict(self, tz: Optional[tzinfo] = None) -> Dict[str, Any]:
        """
        Convert to dictionary for audit logging.

        Returns:
            Dict representation suitable for JSON serialization
        """
        candidate = self._candidate_data_profile
        return {
            "evaluation_reason": self._evaluation_reason.value,
            "data_allowed": self.is_data_allowed(),
            "data_disallowed_reasons": [
                reason.value for reason in sort_disallowed_reasons(self._data_disallowed_reasons)
            ],
            "has_hard_disallowed_reason": self.contains_hard_disallowed_reasons(),
            "data_allowed_reason": self._data_allowed_reason.value,
            "candidate_data_profile": str(candidate) if candidate is not None else None,
            "evaluated_time_ms": self._evaluated_time_ms,
            "evaluated_time": format_evaluation_time(self._evaluated_time_ms, tz),
        }

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return (
            f"DataEvaluation(reason={self._evaluation_reason.value}, "
            f"disallowed={[r.value for r in sort_disallowed_reasons(self._data_disallowed_reasons)]}, "
            f"allowed={self._data_allowed_reason.value})"
        )


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    # Enums
    "DataEvaluationReason",
    "DataDisallowedReason",
    "DataAllowedReason",
    # Metadata
    "DISALLOWED_REASON_IS_HARD",
    "ALLOWED_REASON_PRIORITY",
    # Classes
    "DataProfileRef",
    "DataEvaluation",
    # Constants
    "EVALUATION_TIME_FORMAT",
    "UNEVALUATED_TIME_MS",
    # Functions
    "current_time_millis",
    "format_evaluation_time",
    "sort_disallowed_reasons",
]
