"""
Property-Based Tests for Data Evaluation Record

Reliability Level: L6 Critical
Python 3.8 Compatible

Tests the DataEvaluation record using Hypothesis.
Minimum 100 iterations per property.

Properties tested:
- Property 1: Disallowed Reasons Block Data
- Property 2: Allow Clears Disallow
- Property 3: Disallow Resets Allow
- Property 4: Allowed Reason Priority Monotonicity
- Property 5: Disallow Idempotence and Singleton Queries
- Property 6: Evaluation Time Stamping
"""

import itertools
from typing import List

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

# Import modules under test
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from data_admission.logic.data_evaluation import (
    DataEvaluation,
    DataEvaluationReason,
    DataDisallowedReason,
    DataAllowedReason,
    DataProfileRef,
    UNEVALUATED_TIME_MS,
)
from data_admission.logic.evaluation_verdict import strongest_allowed_reason


# =============================================================================
# HYPOTHESIS STRATEGIES
# =============================================================================

# Strategy for evaluation triggers
evaluation_reason_strategy = st.sampled_from(list(DataEvaluationReason))

# Strategy for disallowed reasons
disallowed_reason_strategy = st.sampled_from(list(DataDisallowedReason))

# Strategy for non-empty sequences of disallowed reasons
disallowed_sequence_strategy = st.lists(disallowed_reason_strategy, min_size=1, max_size=20)

# Strategy for allowed reasons the scheduler actually asserts (never NONE)
asserted_allowed_reason_strategy = st.sampled_from(
    [r for r in DataAllowedReason if r is not DataAllowedReason.NONE]
)

# Strategy for any allowed reason, NONE included
allowed_reason_strategy = st.sampled_from(list(DataAllowedReason))

# Strategy for profile identifiers
profile_id_strategy = st.text(
    alphabet=st.characters(whitelist_categories=('L', 'N'), whitelist_characters='_-'),
    min_size=1,
    max_size=30
)


def counting_clock(start: int = 1000):
    """Clock returning strictly increasing epoch milliseconds."""
    counter = itertools.count(start)
    return lambda: next(counter)


# =============================================================================
# PROPERTY 1: Disallowed Reasons Block Data
# =============================================================================

class TestDisallowedReasonsBlockData:
    """
    Property 1: Disallowed Reasons Block Data

    For any non-empty sequence of disallowed reasons, data is not allowed and
    the hard flag equals the OR of each reason's hard flag.
    """

    @settings(max_examples=100)
    @given(
        reason=evaluation_reason_strategy,
        disallowed=disallowed_sequence_strategy
    )
    def test_disallowed_sequence_blocks_data(
        self,
        reason: DataEvaluationReason,
        disallowed: List[DataDisallowedReason]
    ) -> None:
        evaluation = DataEvaluation(reason)
        for disallowed_reason in disallowed:
            evaluation.add_data_disallowed_reason(disallowed_reason)

        assert evaluation.is_data_allowed() is False
        assert evaluation.contains_hard_disallowed_reasons() == any(
            r.is_hard for r in disallowed
        )
        assert evaluation.data_disallowed_reasons == frozenset(disallowed)
        assert evaluation.data_allowed_reason == DataAllowedReason.NONE

    @settings(max_examples=100)
    @given(disallowed=disallowed_sequence_strategy)
    def test_every_added_reason_is_contained(
        self,
        disallowed: List[DataDisallowedReason]
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        for disallowed_reason in disallowed:
            evaluation.add_data_disallowed_reason(disallowed_reason)

        for candidate in DataDisallowedReason:
            assert evaluation.contains_disallowed(candidate) == (candidate in disallowed)


# =============================================================================
# PROPERTY 2: Allow Clears Disallow
# =============================================================================

class TestAllowClearsDisallow:
    """
    Property 2: Allow Clears Disallow

    Adding an allowed reason after any disallowed reasons leaves no
    disallowed reasons and retains the allowed reason.
    """

    @settings(max_examples=100)
    @given(
        disallowed=disallowed_sequence_strategy,
        allowed=asserted_allowed_reason_strategy
    )
    def test_allow_after_disallow(
        self,
        disallowed: List[DataDisallowedReason],
        allowed: DataAllowedReason
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.DATA_ENABLED)
        for disallowed_reason in disallowed:
            evaluation.add_data_disallowed_reason(disallowed_reason)

        evaluation.add_data_allowed_reason(allowed)

        assert evaluation.is_data_allowed() is True
        assert evaluation.data_disallowed_reasons == frozenset()
        assert evaluation.contains_allowed(allowed) is True
        assert evaluation.contains_hard_disallowed_reasons() is False


# =============================================================================
# PROPERTY 3: Disallow Resets Allow
# =============================================================================

class TestDisallowResetsAllow:
    """
    Property 3: Disallow Resets Allow

    Adding a disallowed reason after an allowed reason resets the allowed
    reason to NONE, regardless of its priority.
    """

    @settings(max_examples=100)
    @given(
        allowed=asserted_allowed_reason_strategy,
        disallowed=disallowed_reason_strategy
    )
    def test_disallow_after_allow(
        self,
        allowed: DataAllowedReason,
        disallowed: DataDisallowedReason
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        evaluation.add_data_allowed_reason(allowed)
        evaluation.add_data_disallowed_reason(disallowed)

        assert evaluation.data_allowed_reason == DataAllowedReason.NONE
        assert evaluation.data_disallowed_reasons == frozenset([disallowed])
        assert evaluation.is_data_allowed() is False

    @settings(max_examples=100)
    @given(
        allowed=asserted_allowed_reason_strategy,
        disallowed=disallowed_reason_strategy,
        reasserted=asserted_allowed_reason_strategy
    )
    def test_priority_restarts_after_disallow(
        self,
        allowed: DataAllowedReason,
        disallowed: DataDisallowedReason,
        reasserted: DataAllowedReason
    ) -> None:
        """A disallow between two allows drops the earlier, stronger reason."""
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        evaluation.add_data_allowed_reason(allowed)
        evaluation.add_data_disallowed_reason(disallowed)
        evaluation.add_data_allowed_reason(reasserted)

        assert evaluation.data_allowed_reason == reasserted


# =============================================================================
# PROPERTY 4: Allowed Reason Priority Monotonicity
# =============================================================================

class TestAllowedReasonPriority:
    """
    Property 4: Allowed Reason Priority Monotonicity

    Within one evaluation the retained allowed reason is the highest
    priority reason asserted, whatever the order.
    """

    @settings(max_examples=100)
    @given(allowed=st.lists(allowed_reason_strategy, min_size=1, max_size=20))
    def test_strongest_reason_retained(
        self,
        allowed: List[DataAllowedReason]
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        for allowed_reason in allowed:
            evaluation.add_data_allowed_reason(allowed_reason)

        expected = max(allowed, key=lambda r: r.priority)
        assert evaluation.data_allowed_reason == expected
        assert evaluation.data_allowed_reason == strongest_allowed_reason(allowed)

    @settings(max_examples=100)
    @given(
        first=asserted_allowed_reason_strategy,
        second=asserted_allowed_reason_strategy
    )
    def test_lower_priority_never_downgrades(
        self,
        first: DataAllowedReason,
        second: DataAllowedReason
    ) -> None:
        assume(second.priority <= first.priority)

        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        evaluation.add_data_allowed_reason(first)
        evaluation.add_data_allowed_reason(second)

        assert evaluation.contains_allowed(first) is True

    def test_emergency_survives_normal(self) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        evaluation.add_data_allowed_reason(DataAllowedReason.EMERGENCY_REQUEST)
        evaluation.add_data_allowed_reason(DataAllowedReason.NORMAL)

        assert evaluation.data_allowed_reason == DataAllowedReason.EMERGENCY_REQUEST

    def test_emergency_overrides_normal(self) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST)
        evaluation.add_data_allowed_reason(DataAllowedReason.NORMAL)
        evaluation.add_data_allowed_reason(DataAllowedReason.EMERGENCY_REQUEST)

        assert evaluation.data_allowed_reason == DataAllowedReason.EMERGENCY_REQUEST


# =============================================================================
# PROPERTY 5: Disallow Idempotence and Singleton Queries
# =============================================================================

class TestDisallowIdempotence:
    """
    Property 5: Disallow Idempotence and Singleton Queries

    Repeating a disallowed reason never grows the set. contains_only is true
    iff the set is exactly that reason.
    """

    @settings(max_examples=100)
    @given(
        disallowed=disallowed_reason_strategy,
        repeats=st.integers(min_value=1, max_value=10)
    )
    def test_repeated_reason_kept_once(
        self,
        disallowed: DataDisallowedReason,
        repeats: int
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.SIM_LOADED)
        for _ in range(repeats):
            evaluation.add_data_disallowed_reason(disallowed)

        assert len(evaluation.data_disallowed_reasons) == 1
        assert evaluation.contains_only(disallowed) is True

    @settings(max_examples=100)
    @given(disallowed=disallowed_sequence_strategy, probe=disallowed_reason_strategy)
    def test_contains_only_matches_singleton(
        self,
        disallowed: List[DataDisallowedReason],
        probe: DataDisallowedReason
    ) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.SIM_LOADED)
        for disallowed_reason in disallowed:
            evaluation.add_data_disallowed_reason(disallowed_reason)

        assert evaluation.contains_only(probe) == (set(disallowed) == {probe})

    @settings(max_examples=100)
    @given(first=disallowed_reason_strategy, second=disallowed_reason_strategy)
    def test_second_distinct_reason_breaks_contains_only(
        self,
        first: DataDisallowedReason,
        second: DataDisallowedReason
    ) -> None:
        assume(first != second)

        evaluation = DataEvaluation(DataEvaluationReason.SIM_LOADED)
        evaluation.add_data_disallowed_reason(first)
        evaluation.add_data_disallowed_reason(second)

        assert evaluation.contains_only(first) is False
        assert evaluation.contains_only(second) is False


# =============================================================================
# PROPERTY 6: Evaluation Time Stamping
# =============================================================================

class TestEvaluationTimeStamping:
    """
    Property 6: Evaluation Time Stamping

    Every allow/disallow mutation stamps the time, including allowed reasons
    that do not replace the stored one. Setting the profile does not.
    """

    @settings(max_examples=100)
    @given(
        steps=st.lists(
            st.one_of(disallowed_reason_strategy, allowed_reason_strategy),
            min_size=1,
            max_size=15
        )
    )
    def test_each_mutation_stamps_time(self, steps: list) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.NEW_REQUEST, clock=counting_clock())
        previous = evaluation.evaluated_time_ms

        for step in steps:
            if isinstance(step, DataDisallowedReason):
                evaluation.add_data_disallowed_reason(step)
            else:
                evaluation.add_data_allowed_reason(step)
            assert evaluation.evaluated_time_ms > previous
            previous = evaluation.evaluated_time_ms

    @settings(max_examples=100)
    @given(profile_id=profile_id_strategy)
    def test_profile_does_not_touch_decision(self, profile_id: str) -> None:
        evaluation = DataEvaluation(DataEvaluationReason.DATA_PROFILES_CHANGED, clock=counting_clock())
        profile = DataProfileRef(profile_id=profile_id)

        evaluation.set_candidate_data_profile(profile)

        assert evaluation.candidate_data_profile == profile
        assert evaluation.evaluated_time_ms == UNEVALUATED_TIME_MS
        assert evaluation.is_data_allowed() is True
        assert evaluation.data_allowed_reason == DataAllowedReason.NONE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
