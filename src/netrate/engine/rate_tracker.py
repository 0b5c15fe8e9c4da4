"""
Counter-to-rate conversion.

Copyright (c) 2026 JL -- see NOTICE and LICENSE files.

entstat reports cumulative counters since boot (or since the last
`entstat -r`). A rate is the delta between two readings divided by the
time between them. When the delta goes negative the counter wrapped or was
reset underneath us; we hold the previous rate for that cycle instead of
guessing at a wrap-corrected value, so a reset never shows up as a zero
or negative spike on the graphs.
"""

from __future__ import annotations

import logging

from netrate.metrics import RateState

log = logging.getLogger(__name__)


def update(state: RateState, raw_value: int, elapsed_seconds: float) -> float:
    """Fold one new raw reading into state and return the current rate.

    elapsed_seconds must be > 0; the dispatcher only resamples once the
    threshold has passed, which guarantees it.
    """
    delta = raw_value - state.last_raw_value

    if delta < 0:
        log.debug("Counter went backwards (%d -> %d), holding rate %.1f",
                  state.last_raw_value, raw_value, state.last_rate)
        rate = state.last_rate
    else:
        rate = delta / elapsed_seconds

    state.last_rate = rate
    state.last_raw_value = raw_value
    return rate


def prime(state: RateState, raw_value: int):
    """Record a baseline reading without producing a rate."""
    state.last_raw_value = raw_value
    state.last_rate = 0.0
