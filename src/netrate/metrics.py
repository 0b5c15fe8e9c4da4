"""
Core metric definitions for netrate.

Four fixed counter kinds per adapter, mirroring what `entstat` reports in
its transmit/receive statistics block.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional


# Sentinel returned for every metric of a disabled adapter
DISABLED_VALUE = -1.0

BYTES_RECEIVED = "bytes_received"
BYTES_SENT = "bytes_sent"
PKTS_RECEIVED = "pkts_received"
PKTS_SENT = "pkts_sent"

# Registration order matters: metrics are exported kind by kind
METRIC_KINDS = (BYTES_RECEIVED, BYTES_SENT, PKTS_RECEIVED, PKTS_SENT)

KIND_UNITS = {
    BYTES_RECEIVED: "bytes/sec",
    BYTES_SENT: "bytes/sec",
    PKTS_RECEIVED: "packets/sec",
    PKTS_SENT: "packets/sec",
}

KIND_DESCRIPTIONS = {
    BYTES_RECEIVED: "Bytes Received",
    BYTES_SENT: "Bytes Sent",
    PKTS_RECEIVED: "Packets Received",
    PKTS_SENT: "Packets Sent",
}


@dataclass
class CounterSample:
    """Raw cumulative counters from one entstat run. None = unavailable."""

    bytes_received: Optional[int] = None
    bytes_sent: Optional[int] = None
    pkts_received: Optional[int] = None
    pkts_sent: Optional[int] = None

    def get(self, kind: str) -> Optional[int]:
        return getattr(self, kind)

    @property
    def empty(self) -> bool:
        return all(self.get(kind) is None for kind in METRIC_KINDS)


@dataclass
class RateState:
    """Per (interface, kind) tracking state. last_rate is never negative."""

    last_raw_value: int = 0
    last_rate: float = 0.0


@dataclass
class InterfaceRecord:
    name: str
    resample_threshold: float = 5.0
    enabled: bool = True
    last_sample_time: float = 0.0
    rates: Dict[str, RateState] = field(
        default_factory=lambda: {kind: RateState() for kind in METRIC_KINDS}
    )
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )


@dataclass
class MetricDefinition:
    """One exported metric, as handed to the monitoring host at init time."""

    name: str
    interface: str
    kind: str
    units: str
    description: str
    tmax: int = 60
    value_type: str = "double"
    slope: str = "both"
    fmt: str = "%.1f"
    metadata: Dict[str, str] = field(default_factory=dict)

    def summary(self) -> dict:
        """Return a plain dict for display or export."""
        return {
            "name": self.name,
            "units": self.units,
            "type": self.value_type,
            "slope": self.slope,
            "fmt": self.fmt,
            "tmax": self.tmax,
            "desc": self.description,
            **self.metadata,
        }
