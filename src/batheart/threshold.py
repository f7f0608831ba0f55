"""Threshold evaluation: battery sample -> conservation decision + next interval.

Pure functions, no I/O.
"""

from dataclasses import dataclass

from batheart.battery import BatterySample

FAST_INTERVAL = 1.0  # Seconds between polls while charging right at the threshold
SLOW_INTERVAL = 300.0  # Seconds between polls otherwise (5 minutes)
INITIAL_INTERVAL = 60.0  # Seconds before the first poll


@dataclass(frozen=True)
class Decision:
    """Outcome of one evaluation.

    next_interval is None when the current interval must be kept.
    """

    skip: bool
    enable_conservation: bool = False
    next_interval: float | None = None


def in_threshold_range(capacity: int, threshold: int) -> bool:
    """Return True if capacity lies in the open interval (threshold-1, threshold+1).

    For integers this is an exact match. Python ints are signed, so
    threshold=0 gives the interval (-1, 1) and matches capacity 0.
    """
    return threshold - 1 < capacity < threshold + 1


def decide(sample: BatterySample, previous_capacity: int, threshold: int) -> Decision:
    """Map a battery sample to a conservation decision.

    Rules, first match wins:
    1. Capacity unchanged since last poll: skip, keep interval.
    2. At threshold and charging: enable, poll fast.
    3. Not charging: disable, poll slow.
    4. Charging elsewhere: enable, poll slow.
    """
    if sample.capacity == previous_capacity:
        return Decision(skip=True)

    if in_threshold_range(sample.capacity, threshold) and sample.charging:
        return Decision(skip=False, enable_conservation=True, next_interval=FAST_INTERVAL)
    if not sample.charging:
        return Decision(skip=False, enable_conservation=False, next_interval=SLOW_INTERVAL)
    return Decision(skip=False, enable_conservation=True, next_interval=SLOW_INTERVAL)
