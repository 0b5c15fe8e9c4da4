"""
Metric dispatcher: answers the host's per-metric polls.

Copyright (c) 2026 JL -- see NOTICE and LICENSE files.

The host asks for one metric at a time, but entstat hands back all four
counters of an adapter in one go. So a poll for any kind of an adapter
whose threshold has passed resamples the whole adapter, and the next three
polls for the same adapter are served from the cached rates. That also
keeps the four rates consistent with each other: they always come from the
same instant.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from netrate.engine import rate_tracker
from netrate.engine.fault_isolator import FaultIsolator
from netrate.engine.registry import InterfaceRegistry
from netrate.metrics import DISABLED_VALUE, METRIC_KINDS, CounterSample, InterfaceRecord

log = logging.getLogger(__name__)


class MetricDispatcher:

    def __init__(
        self,
        registry: InterfaceRegistry,
        sample_fn: Callable[[str], CounterSample],
        isolator: FaultIsolator,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._registry = registry
        self._sample_fn = sample_fn
        self._isolator = isolator
        self._clock = clock
        self._lookup = registry.metric_lookup()
        self.samples_taken = 0

    def get(self, interface_index: int, kind: str) -> float:
        """Current rate for one (adapter, kind), resampling if it's due."""
        if kind not in METRIC_KINDS:
            raise ValueError(f"Unknown metric kind: {kind}")

        if not 0 <= interface_index < len(self._registry):
            log.debug("Poll for adapter index %d out of range", interface_index)
            return 0.0

        record = self._registry[interface_index]

        with record.lock:
            if not record.enabled:
                return DISABLED_VALUE

            now = self._clock()
            elapsed = now - record.last_sample_time

            if elapsed > record.resample_threshold:
                self._resample(record, now, elapsed)
                if not record.enabled:
                    return DISABLED_VALUE

            return record.rates[kind].last_rate

    def get_metric(self, name: str) -> float:
        """Same as get(), addressed by exported metric name (e.g. ent0_bytes_sent)."""
        target = self._lookup.get(name)
        if target is None:
            log.debug("Poll for unknown metric %s", name)
            return 0.0
        return self.get(*target)

    def prime(self):
        """Take a baseline reading of every adapter. Rates start at zero."""
        for record in self._registry:
            with record.lock:
                sample = self._take_sample(record)
                # Stamp each adapter with the time of its own baseline read
                record.last_sample_time = self._clock()

                for kind in METRIC_KINDS:
                    raw = sample.get(kind) if sample is not None else None
                    if raw is not None:
                        rate_tracker.prime(record.rates[kind], raw)
                    else:
                        record.rates[kind].last_rate = 0.0

    def _resample(self, record: InterfaceRecord, now: float, elapsed: float):
        sample = self._take_sample(record)
        record.last_sample_time = now

        if sample is None:
            return

        for kind in METRIC_KINDS:
            raw = sample.get(kind)
            if raw is None:
                # Keep the last known rate for counters we couldn't read
                continue
            rate_tracker.update(record.rates[kind], raw, elapsed)

    def _take_sample(self, record: InterfaceRecord) -> Optional[CounterSample]:
        self.samples_taken += 1
        return self._isolator.call(record, self._sample_fn)
