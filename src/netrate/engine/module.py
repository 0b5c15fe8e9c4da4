"""
The collector as the monitoring host sees it: init, metric table,
per-metric handler, cleanup.

Copyright (c) 2026 JL -- see NOTICE and LICENSE files.

All state (registry, rate table, isolator) hangs off one NetRateModule
instance. Nothing is global, so tests can run several side by side.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from netrate.collector.base import CounterSampler
from netrate.config import CollectorConfig
from netrate.engine.dispatcher import MetricDispatcher
from netrate.engine.fault_isolator import FaultIsolator
from netrate.engine.registry import InterfaceRegistry
from netrate.metrics import DISABLED_VALUE, METRIC_KINDS, MetricDefinition

log = logging.getLogger(__name__)


class NetRateModule:

    def __init__(
        self,
        sampler: CounterSampler,
        config: Optional[CollectorConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sampler = sampler
        self.config = (config or CollectorConfig()).validate()
        self._clock = clock
        self.registry: Optional[InterfaceRegistry] = None
        self.isolator = FaultIsolator(timeout_seconds=self.config.sample_timeout)
        self.dispatcher: Optional[MetricDispatcher] = None
        self.metrics_info: List[MetricDefinition] = []

    def init(self) -> List[MetricDefinition]:
        """Enumerate adapters, register their metrics and take baseline readings."""
        names = self.sampler.enumerate()
        self.registry = InterfaceRegistry(names, resample_threshold=self.config.resample_threshold)
        self.dispatcher = MetricDispatcher(
            self.registry, self.sampler.sample, self.isolator, clock=self._clock
        )
        self.metrics_info = self.registry.metric_definitions(
            tmax=self.config.tmax, group=self.config.metric_group
        )

        log.info("Registered %d metrics for %d adapters from %s",
                 len(self.metrics_info), len(self.registry), self.sampler.name())

        self.dispatcher.prime()
        return self.metrics_info

    def _require_init(self) -> MetricDispatcher:
        if self.dispatcher is None:
            raise RuntimeError("NetRateModule.init() has not been called")
        return self.dispatcher

    def handle(self, metric_index: int) -> float:
        """Value for the metric at this position in metrics_info."""
        dispatcher = self._require_init()
        if not 0 <= metric_index < len(self.metrics_info):
            log.debug("Poll for metric index %d out of range", metric_index)
            return 0.0
        return dispatcher.get_metric(self.metrics_info[metric_index].name)

    def get_metric(self, name: str) -> float:
        return self._require_init().get_metric(name)

    def poll(self) -> Dict[str, float]:
        """Poll every registered metric once, in registration order."""
        return {
            definition.name: self.handle(index)
            for index, definition in enumerate(self.metrics_info)
        }

    def status(self) -> List[dict]:
        """Per-adapter view of the rate table for dashboards."""
        if self.registry is None:
            return []

        rows = []
        for record in self.registry:
            row = {"interface": record.name, "enabled": record.enabled}
            for kind in METRIC_KINDS:
                row[kind] = record.rates[kind].last_rate if record.enabled else DISABLED_VALUE
            rows.append(row)
        return rows

    def close(self):
        if hasattr(self.sampler, "close"):
            self.sampler.close()
        log.info("Collector stopped, %d adapters disabled by timeout", self.isolator.timeouts)
