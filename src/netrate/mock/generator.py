"""
Mock entstat generator.

Produces fake but realistic `entstat` and `lsdev` output so we can develop
and test off AIX. Traffic is loosely modeled on a VIOS Shared Ethernet
Adapter bridging a handful of LPARs: a slow sinusoidal load with random
bursts, ~900 byte average frames, and the very occasional counter reset
(`entstat -r`) to exercise rollover handling.
"""

import math
import random
import threading
from typing import Dict, Iterable, List

DEFAULT_ADAPTERS = ("ent0", "ent1", "ent4")

_ENTSTAT_TEMPLATE = """\
-------------------------------------------------------------
ETHERNET STATISTICS ({name}) :
Device Type: Shared Ethernet Adapter
Hardware Address: 00:14:5e:{mac}
Elapsed Time: 0 days {hours} hours {minutes} minutes {seconds} seconds

Transmit Statistics:                          Receive Statistics:
--------------------                          -------------------
Packets: {pkts_sent:<38d}Packets: {pkts_received}
Bytes: {bytes_sent:<40d}Bytes: {bytes_received}
Interrupts: 0                                 Interrupts: {interrupts}
Transmit Errors: 0                            Receive Errors: 0
Packets Dropped: 0                            Packets Dropped: 0
                                              Bad Packets: 0
Max Packets on S/W Transmit Queue: 53
S/W Transmit Queue Overflow: 0
Current S/W+H/W Transmit Queue Length: 1

Broadcast Packets: {broadcast:<28d}Broadcast Packets: {broadcast}
Multicast Packets: 112                        Multicast Packets: 4302
"""


class _AdapterState:
    """Counters plus a private clock and RNG, so adapters don't depend on poll order."""

    def __init__(self, seed: int, name: str):
        self.rng = random.Random(f"{seed}:{name}")
        self.tick = 0
        self.reset()

    def reset(self):
        self.bytes_sent = 0
        self.bytes_received = 0
        self.pkts_sent = 0
        self.pkts_received = 0


class MockEntstat:
    """Simulated entstat. Each render() call advances that adapter's counters."""

    def __init__(
        self,
        seed: int = 42,
        adapters: Iterable[str] = DEFAULT_ADAPTERS,
        hang: Iterable[str] = (),
        reset_probability: float = 0.01,
        hang_seconds: float = 3600.0,
    ):
        self.adapters: List[str] = list(adapters)
        self.hang = set(hang)
        self.hang_seconds = hang_seconds
        self.reset_probability = reset_probability
        self._states: Dict[str, _AdapterState] = {
            name: _AdapterState(seed, name) for name in self.adapters
        }
        self._lock = threading.Lock()
        self._release = threading.Event()

    def lsdev(self) -> str:
        """`lsdev -Cc adapter` output with a couple of non-Ethernet devices mixed in."""
        lines = ["fcs0      Available 00-00 8Gb PCI Express Dual Port FC Adapter"]
        for i, name in enumerate(self.adapters):
            lines.append(f"{name:<9} Available 0{i}-00 Shared Ethernet Adapter")
        lines.append("ent9      Defined         Virtual I/O Ethernet Adapter (l-lan)")
        lines.append("vsa0      Available       LPAR Virtual Serial Adapter")
        return "\n".join(lines) + "\n"

    def render(self, adapter: str) -> str:
        """Generate one entstat reading for an adapter, advancing the simulation."""
        if adapter in self.hang:
            # Blocks well past any sane deadline; release() lets tests clean up
            self._release.wait(self.hang_seconds)
            return ""

        state = self._states.get(adapter)
        if state is None:
            return ""

        # Readings run on isolator worker threads, several at once
        with self._lock:
            state.tick += 1
            t = state.tick
            rng = state.rng

            if rng.random() < self.reset_probability:
                state.reset()

            # ~5 seconds of traffic per reading
            base_load = 4_000_000 + 3_000_000 * math.sin(t * 0.05)
            burst = rng.random() * 6_000_000 if rng.random() > 0.9 else 0
            rx_bytes = int(max(0, base_load + burst + rng.gauss(0, 200_000)))
            tx_bytes = int(rx_bytes * rng.uniform(0.3, 0.6))

            state.bytes_received += rx_bytes
            state.bytes_sent += tx_bytes
            state.pkts_received += rx_bytes // 900
            state.pkts_sent += tx_bytes // 700

            counters = (state.pkts_sent, state.pkts_received,
                        state.bytes_sent, state.bytes_received)

        pkts_sent, pkts_received, bytes_sent, bytes_received = counters
        seconds = t * 5
        return _ENTSTAT_TEMPLATE.format(
            name=adapter,
            mac=f"{t % 256:02x}:{len(adapter):02x}:01",
            hours=(seconds // 3600) % 24,
            minutes=(seconds // 60) % 60,
            seconds=seconds % 60,
            pkts_sent=pkts_sent,
            pkts_received=pkts_received,
            bytes_sent=bytes_sent,
            bytes_received=bytes_received,
            interrupts=pkts_received // 3,
            broadcast=t * 7,
        )

    def release(self):
        """Unblock any reading stuck on a hanging adapter."""
        self._release.set()
