"""
Tests for the metric dispatcher: threshold enforcement, rollover, fault
isolation. Uses a fake clock and a scripted sampler instead of entstat.
"""

import threading
from typing import Dict, List

import pytest

from netrate.engine.dispatcher import MetricDispatcher
from netrate.engine.fault_isolator import FaultIsolator
from netrate.engine.registry import InterfaceRegistry
from netrate.metrics import (
    BYTES_RECEIVED,
    BYTES_SENT,
    PKTS_RECEIVED,
    PKTS_SENT,
    CounterSample,
)


class _FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _ScriptedSampler:
    """Hands out pre-baked samples per adapter; adapters in `hang` block."""

    def __init__(self, script: Dict[str, List[CounterSample]], hang=()):
        self._script = {name: list(samples) for name, samples in script.items()}
        self.hang = set(hang)
        self.calls: Dict[str, int] = {}
        self.release = threading.Event()

    def __call__(self, name: str) -> CounterSample:
        self.calls[name] = self.calls.get(name, 0) + 1
        if name in self.hang:
            self.release.wait(5)
            return CounterSample()
        samples = self._script[name]
        return samples.pop(0) if len(samples) > 1 else samples[0]


def _sample(bytes_received=None, bytes_sent=None, pkts_received=None, pkts_sent=None):
    return CounterSample(bytes_received=bytes_received, bytes_sent=bytes_sent,
                         pkts_received=pkts_received, pkts_sent=pkts_sent)


def _full(value: int) -> CounterSample:
    return _sample(value, value, value, value)


def _make(script, hang=(), threshold=5.0, timeout=0.05):
    clock = _FakeClock()
    sampler = _ScriptedSampler(script, hang=hang)
    registry = InterfaceRegistry(list(script), resample_threshold=threshold)
    dispatcher = MetricDispatcher(registry, sampler, FaultIsolator(timeout), clock=clock)
    return dispatcher, registry, sampler, clock


def test_first_reading_after_prime():
    dispatcher, _, _, clock = _make({"ent0": [_full(1000), _full(3000)]})
    dispatcher.prime()

    clock.now += 5.5
    # (3000 - 1000) / 5.5
    assert dispatcher.get(0, BYTES_RECEIVED) == 2000 / 5.5


def test_rates_are_zero_right_after_prime():
    dispatcher, _, sampler, _ = _make({"ent0": [_full(1000), _full(3000)]})
    dispatcher.prime()

    for kind in (BYTES_RECEIVED, BYTES_SENT, PKTS_RECEIVED, PKTS_SENT):
        assert dispatcher.get(0, kind) == 0.0
    assert sampler.calls["ent0"] == 1


def test_no_resample_inside_threshold():
    dispatcher, _, sampler, clock = _make({"ent0": [_full(0), _full(1000), _full(9999)]})
    dispatcher.prime()

    clock.now += 6.0
    rate = dispatcher.get(0, BYTES_SENT)
    assert sampler.calls["ent0"] == 2

    for step in (1.0, 2.0, 1.5, 0.5):  # ends exactly on the threshold
        clock.now += step
        assert dispatcher.get(0, BYTES_SENT) == rate

    assert sampler.calls["ent0"] == 2

    clock.now += 0.01
    assert dispatcher.get(0, BYTES_SENT) != rate
    assert sampler.calls["ent0"] == 3


def test_one_sample_serves_all_four_kinds():
    sample = _sample(bytes_received=5000, bytes_sent=2500, pkts_received=50, pkts_sent=25)
    dispatcher, _, sampler, clock = _make({"ent0": [_full(0), sample]})
    dispatcher.prime()

    clock.now += 10.0
    assert dispatcher.get(0, PKTS_SENT) == 2.5
    assert dispatcher.get(0, BYTES_RECEIVED) == 500.0
    assert dispatcher.get(0, BYTES_SENT) == 250.0
    assert dispatcher.get(0, PKTS_RECEIVED) == 5.0
    assert sampler.calls["ent0"] == 2


def test_rollover_holds_rate():
    dispatcher, _, _, clock = _make({"ent0": [_full(1000), _full(3000), _full(2500)]})
    dispatcher.prime()

    clock.now += 5.5
    first = dispatcher.get(0, BYTES_RECEIVED)
    assert first == 2000 / 5.5

    clock.now += 5.25
    assert dispatcher.get(0, BYTES_RECEIVED) == first


def test_unavailable_counter_keeps_last_rate():
    dispatcher, registry, _, clock = _make({
        "ent0": [
            _full(0),
            _full(1000),
            _sample(bytes_received=None, bytes_sent=4000, pkts_received=None, pkts_sent=40),
        ],
    })
    dispatcher.prime()

    clock.now += 10.0
    assert dispatcher.get(0, BYTES_RECEIVED) == 100.0

    clock.now += 10.0
    assert dispatcher.get(0, BYTES_RECEIVED) == 100.0
    assert dispatcher.get(0, BYTES_SENT) == 300.0
    # The unread counter's baseline isn't touched either
    assert registry[0].rates[BYTES_RECEIVED].last_raw_value == 1000


def test_empty_sample_keeps_everything():
    dispatcher, registry, _, clock = _make({"ent0": [_full(0), _full(500), CounterSample()]})
    dispatcher.prime()

    clock.now += 10.0
    assert dispatcher.get(0, PKTS_RECEIVED) == 50.0

    clock.now += 10.0
    assert dispatcher.get(0, PKTS_RECEIVED) == 50.0
    assert registry[0].enabled is True


def test_hang_returns_sentinel_forever():
    """ent1 never answers: ent1_bytes_sent is -1.0 now and on every later poll."""
    dispatcher, registry, sampler, clock = _make(
        {"ent0": [_full(0), _full(100)], "ent1": [_full(0)]}, hang=["ent1"]
    )
    try:
        clock.now += 6.0
        assert dispatcher.get(1, BYTES_SENT) == -1.0
        assert registry[1].enabled is False
        assert sampler.calls["ent1"] == 1

        for _ in range(3):
            clock.now += 60.0
            for kind in (BYTES_RECEIVED, BYTES_SENT, PKTS_RECEIVED, PKTS_SENT):
                assert dispatcher.get(1, kind) == -1.0

        assert sampler.calls["ent1"] == 1
        assert dispatcher.get_metric("ent1_bytes_sent") == -1.0
    finally:
        sampler.release.set()


def test_disabling_one_adapter_leaves_others_alone():
    dispatcher, registry, sampler, clock = _make(
        {"ent0": [_full(0), _full(1000)], "ent1": [_full(0)]}, hang=["ent1"]
    )
    try:
        sampler.hang.discard("ent1")
        dispatcher.prime()
        sampler.hang.add("ent1")

        clock.now += 10.0
        ent0_rate = dispatcher.get(0, BYTES_RECEIVED)
        assert ent0_rate == 100.0
        ent0_state = {k: (s.last_raw_value, s.last_rate) for k, s in registry[0].rates.items()}

        assert dispatcher.get(1, BYTES_RECEIVED) == -1.0

        assert registry[0].enabled is True
        assert {k: (s.last_raw_value, s.last_rate) for k, s in registry[0].rates.items()} == ent0_state
        assert dispatcher.get(0, BYTES_RECEIVED) == ent0_rate
    finally:
        sampler.release.set()


def test_prime_can_disable_a_hanging_adapter():
    dispatcher, registry, sampler, _ = _make({"ent0": [_full(0)], "ent1": [_full(0)]}, hang=["ent1"])
    try:
        dispatcher.prime()
        assert registry[0].enabled is True
        assert registry[1].enabled is False
        assert dispatcher.get(1, PKTS_SENT) == -1.0
    finally:
        sampler.release.set()


def test_get_metric_by_name():
    dispatcher, _, _, clock = _make({"ent0": [_full(0), _full(50)], "ent_sea": [_full(0), _full(500)]})
    dispatcher.prime()

    clock.now += 10.0
    assert dispatcher.get_metric("ent0_pkts_sent") == 5.0
    assert dispatcher.get_metric("ent_sea_bytes_received") == 50.0


def test_unknown_metric_name_is_zero():
    dispatcher, _, sampler, _ = _make({"ent0": [_full(0)]})
    dispatcher.prime()

    assert dispatcher.get_metric("ent9_bytes_received") == 0.0
    assert dispatcher.get_metric("ent0_errors") == 0.0
    assert sampler.calls["ent0"] == 1


def test_unknown_kind_raises():
    dispatcher, _, _, _ = _make({"ent0": [_full(0)]})
    with pytest.raises(ValueError, match="bytes_dropped"):
        dispatcher.get(0, "bytes_dropped")


def test_out_of_range_index_is_zero():
    dispatcher, registry, sampler, clock = _make(
        {"ent0": [_full(0), _full(0)], "ent1": [_full(0), _full(1000)]}
    )
    dispatcher.prime()

    clock.now += 10.0
    assert dispatcher.get(1, BYTES_RECEIVED) == 100.0

    # No wrap-around to the last adapter
    assert dispatcher.get(-1, BYTES_RECEIVED) == 0.0
    assert dispatcher.get(len(registry), BYTES_RECEIVED) == 0.0
    assert dispatcher.get(5, PKTS_SENT) == 0.0
    assert sampler.calls == {"ent0": 1, "ent1": 2}


def test_prime_stamps_each_adapter_after_its_own_read():
    clock = _FakeClock()
    script = {"ent0": [_full(0), _full(3000)], "ent1": [_full(0), _full(3000)]}
    scripted = _ScriptedSampler(script)

    def slow_sampler(name):
        # Every entstat run takes three seconds
        clock.now += 3.0
        return scripted(name)

    registry = InterfaceRegistry(list(script))
    dispatcher = MetricDispatcher(registry, slow_sampler, FaultIsolator(1.0), clock=clock)
    dispatcher.prime()

    assert registry[0].last_sample_time == 1003.0
    assert registry[1].last_sample_time == 1006.0

    clock.now = 1012.0
    # (3000 - 0) / (1012 - 1006): stamped 1006, not the 1000 prime() started at
    assert dispatcher.get(1, BYTES_RECEIVED) == 3000 / 6.0
