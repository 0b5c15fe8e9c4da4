"""Tests for counter-to-rate conversion."""

from netrate.engine.rate_tracker import prime, update
from netrate.metrics import RateState


def test_rate_is_delta_over_elapsed():
    state = RateState(last_raw_value=1000)
    assert update(state, 3000, 5.0) == 400.0
    assert state.last_rate == 400.0
    assert state.last_raw_value == 3000


def test_non_decreasing_sequence_gives_exact_rates():
    state = RateState()
    prime(state, 100)

    raws = [100, 600, 600, 2600, 2700]
    elapsed = [2.0, 5.5, 4.0, 10.0, 0.5]
    for prev, raw, dt in zip(raws, raws[1:], elapsed):
        assert update(state, raw, dt) == (raw - prev) / dt


def test_negative_delta_holds_previous_rate():
    """ent0: 1000 -> 3000 over 5s is 400/s, then a reset to 2500 keeps 400/s."""
    state = RateState()
    prime(state, 1000)
    assert update(state, 3000, 5.0) == 400.0

    assert update(state, 2500, 5.1) == 400.0
    assert state.last_rate == 400.0
    # The new baseline is taken even though the rate was held
    assert state.last_raw_value == 2500


def test_rate_resumes_after_reset():
    state = RateState()
    prime(state, 1000)
    update(state, 3000, 5.0)
    update(state, 10, 5.0)

    assert update(state, 510, 5.0) == 100.0


def test_reset_before_any_rate_holds_zero():
    state = RateState()
    prime(state, 5000)
    assert update(state, 20, 5.0) == 0.0


def test_zero_delta_is_zero_rate():
    state = RateState(last_raw_value=42, last_rate=12.5)
    assert update(state, 42, 6.0) == 0.0


def test_prime_resets_rate():
    state = RateState(last_raw_value=10, last_rate=99.0)
    prime(state, 500)
    assert state.last_rate == 0.0
    assert state.last_raw_value == 500


def test_large_counters():
    state = RateState(last_raw_value=2**63 - 10_000_000)
    assert update(state, 2**63 - 5_000_000, 5.0) == 1_000_000.0
