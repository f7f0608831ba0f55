"""Tests for threshold evaluation."""

import pytest

from batheart.threshold import (
    FAST_INTERVAL,
    INITIAL_INTERVAL,
    SLOW_INTERVAL,
    Decision,
    decide,
    in_threshold_range,
)
from tests.conftest import make_sample


def test_interval_constants():
    """Intervals match the documented cadence."""
    assert FAST_INTERVAL == 1.0
    assert SLOW_INTERVAL == 5 * 60
    assert INITIAL_INTERVAL == 60.0


# === in_threshold_range ===


def test_in_range_exact_match():
    """Capacity equal to threshold is in range."""
    assert in_threshold_range(80, 80) is True


@pytest.mark.parametrize("capacity", [78, 79, 81, 82])
def test_in_range_is_not_a_tolerance_band(capacity):
    """Neighbours of the threshold are outside the open interval."""
    assert in_threshold_range(capacity, 80) is False


def test_in_range_threshold_zero_does_not_wrap():
    """threshold=0 uses signed arithmetic: only capacity 0 matches."""
    assert in_threshold_range(0, 0) is True
    assert in_threshold_range(1, 0) is False
    assert in_threshold_range(100, 0) is False


# === decide ===


@pytest.mark.parametrize("threshold", [0, 50, 80, 100])
@pytest.mark.parametrize("charging", [True, False])
def test_decide_skips_when_capacity_unchanged(threshold, charging):
    """Unchanged capacity skips regardless of threshold and charging."""
    decision = decide(make_sample(capacity=threshold, charging=charging), threshold, threshold)

    assert decision.skip is True
    assert decision.next_interval is None


@pytest.mark.parametrize("threshold", [1, 50, 80, 100])
def test_decide_at_threshold_while_charging_polls_fast(threshold):
    """capacity == threshold while charging enables conservation at 1s."""
    decision = decide(make_sample(capacity=threshold, charging=True), 0, threshold)

    assert decision == Decision(skip=False, enable_conservation=True, next_interval=1.0)


@pytest.mark.parametrize("capacity", [0, 20, 79, 80, 81, 100])
def test_decide_not_charging_disables(capacity):
    """Not charging always disables conservation and polls slowly."""
    decision = decide(make_sample(capacity=capacity, charging=False), 55, 80)

    assert decision.skip is False
    assert decision.enable_conservation is False
    assert decision.next_interval == 300.0


@pytest.mark.parametrize("capacity", [5, 79, 81, 100])
def test_decide_charging_off_threshold_enables_slow(capacity):
    """Charging away from the threshold enables conservation at 5m."""
    decision = decide(make_sample(capacity=capacity, charging=True), 55, 80)

    assert decision == Decision(skip=False, enable_conservation=True, next_interval=300.0)


def test_decide_threshold_zero_charging():
    """threshold=0, capacity=0, charging, previous differs: fast poll."""
    decision = decide(make_sample(capacity=0, charging=True), 5, 0)

    assert decision.next_interval == FAST_INTERVAL
    assert decision.enable_conservation is True


# === Scenarios ===


def test_scenario_reaching_threshold_from_cold_start():
    """capacity=80, prev=0, threshold=80, charging -> enable, 1s."""
    decision = decide(make_sample(capacity=80, charging=True), 0, 80)

    assert decision.skip is False
    assert decision.enable_conservation is True
    assert decision.next_interval == 1.0


def test_scenario_unchanged_capacity():
    """capacity=50, prev=50, threshold=80, charging -> skip."""
    decision = decide(make_sample(capacity=50, charging=True), 50, 80)

    assert decision.skip is True


def test_scenario_discharging():
    """capacity=60, prev=59, threshold=80, not charging -> disable, 5m."""
    decision = decide(make_sample(capacity=60, charging=False), 59, 80)

    assert decision.skip is False
    assert decision.enable_conservation is False
    assert decision.next_interval == 300.0
