"""
Parsers for the two AIX commands we shell out to. No external deps.

entstat prints transmit and receive statistics side by side:

    Transmit Statistics:                          Receive Statistics:
    --------------------                          -------------------
    Packets: 1397852                              Packets: 2542128
    Bytes: 204612890                              Bytes: 1683716447

so on the first `Packets:` and `Bytes:` rows field 2 is the sent count and
field 4 the received count. Later sections (per-adapter blocks of an SEA,
"Broadcast Packets:" and friends) are ignored.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from netrate.metrics import CounterSample

log = logging.getLogger(__name__)


def parse_counter(token: str) -> Optional[int]:
    """A single cumulative counter, or None if it isn't a non-negative integer."""
    try:
        value = int(token)
    except ValueError:
        return None
    return value if value >= 0 else None


def _parse_pair(line: str) -> Tuple[Optional[int], Optional[int]]:
    """Returns (sent, received) from one side-by-side statistics row."""
    parts = line.split()
    sent = parse_counter(parts[1]) if len(parts) > 1 else None
    received = parse_counter(parts[3]) if len(parts) > 3 else None
    return sent, received


def parse_entstat_text(text: str) -> CounterSample:
    """Map raw entstat output to a CounterSample.

    Counters that are missing or garbled come back as None so the caller
    can keep the previous rate for just those kinds.
    """
    packets_line = None
    bytes_line = None

    for line in text.splitlines():
        stripped = line.strip()
        if packets_line is None and stripped.startswith("Packets:"):
            packets_line = stripped
        elif bytes_line is None and stripped.startswith("Bytes:"):
            bytes_line = stripped

        if packets_line is not None and bytes_line is not None:
            break

    sample = CounterSample()

    if packets_line is not None:
        sample.pkts_sent, sample.pkts_received = _parse_pair(packets_line)
    if bytes_line is not None:
        sample.bytes_sent, sample.bytes_received = _parse_pair(bytes_line)

    if sample.empty:
        log.debug("No usable counters in entstat output (%d bytes)", len(text))

    return sample


def parse_lsdev_adapters(text: str) -> List[str]:
    """Ethernet adapters in state Available from `lsdev -Cc adapter`.

    Device order is preserved; it decides metric registration order.
    """
    names: List[str] = []

    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        name, status = parts[0], parts[1]
        if "ent" in name and status == "Available":
            names.append(name)

    return names
