"""
Interface registry: the fixed table of adapters x metric kinds.

Copyright (c) 2026 JL -- see NOTICE and LICENSE files.

Built once at startup from device enumeration and never resized. Adapters
that show up later are picked up on the next restart; adapters that go
away simply stop producing fresh counters.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from netrate.config import DEFAULT_RESAMPLE_THRESHOLD
from netrate.metrics import (
    KIND_DESCRIPTIONS,
    KIND_UNITS,
    METRIC_KINDS,
    InterfaceRecord,
    MetricDefinition,
)

log = logging.getLogger(__name__)


class InterfaceRegistry:

    def __init__(self, names: Sequence[str], resample_threshold: float = DEFAULT_RESAMPLE_THRESHOLD):
        self._records: List[InterfaceRecord] = [
            InterfaceRecord(name=name, resample_threshold=resample_threshold)
            for name in names
        ]
        self._by_name: Dict[str, int] = {
            record.name: index for index, record in enumerate(self._records)
        }
        if not self._records:
            log.warning("No available Ethernet adapters found, exporting no metrics")

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[InterfaceRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> InterfaceRecord:
        return self._records[index]

    def index_of(self, name: str) -> Optional[int]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [record.name for record in self._records]

    def metric_definitions(
        self, tmax: int = 60, group: str = "ibmnet"
    ) -> List[MetricDefinition]:
        """One definition per (kind, adapter), grouped by kind."""
        definitions: List[MetricDefinition] = []

        for kind in METRIC_KINDS:
            for record in self._records:
                definitions.append(MetricDefinition(
                    name=f"{record.name}_{kind}",
                    interface=record.name,
                    kind=kind,
                    units=KIND_UNITS[kind],
                    description=f"{record.name} {KIND_DESCRIPTIONS[kind]}",
                    tmax=tmax,
                    metadata={"GROUP": group},
                ))

        return definitions

    def metric_lookup(self) -> Dict[str, Tuple[int, str]]:
        """Metric name -> (interface index, kind)."""
        # Adapter names can't be trusted to be free of "_", so no splitting
        return {
            f"{record.name}_{kind}": (index, kind)
            for kind in METRIC_KINDS
            for index, record in enumerate(self._records)
        }
