"""
Deadline enforcement for sampler calls.

Copyright (c) 2026 JL -- see NOTICE and LICENSE files.

entstat occasionally wedges on a misbehaving adapter and never returns.
Each sampler call runs on its own daemon thread and is joined with a fixed
deadline. If the deadline passes, the thread is abandoned (not killed),
the adapter is switched off for the rest of the process lifetime and we
move on. Only that adapter is affected: the caller blocks for at most one
deadline per call.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

from netrate.collector.base import SamplerTimeout
from netrate.config import DEFAULT_SAMPLE_TIMEOUT
from netrate.metrics import InterfaceRecord

log = logging.getLogger(__name__)

T = TypeVar("T")


class _Call:
    """Result slot shared between the caller and the worker thread."""

    def __init__(self):
        self.result = None
        self.error: Optional[Exception] = None
        self.done = threading.Event()


class FaultIsolator:

    def __init__(self, timeout_seconds: float = DEFAULT_SAMPLE_TIMEOUT):
        self._timeout = timeout_seconds
        self.timeouts = 0

    @property
    def timeout(self) -> float:
        return self._timeout

    def call(self, record: InterfaceRecord, fn: Callable[[str], T]) -> Optional[T]:
        """Run fn(record.name) with a deadline.

        Returns fn's result, or None if the call timed out or failed. A
        timeout disables the record permanently.
        """
        slot = _Call()

        def _run():
            try:
                slot.result = fn(record.name)
            except Exception as e:
                slot.error = e
            finally:
                slot.done.set()

        worker = threading.Thread(
            target=_run, name=f"netrate-sample-{record.name}", daemon=True
        )
        worker.start()

        if not slot.done.wait(self._timeout):
            self._disable(record, f"no response within {self._timeout:.1f}s")
            return None

        if isinstance(slot.error, SamplerTimeout):
            self._disable(record, str(slot.error))
            return None

        if slot.error is not None:
            log.warning("Sampling %s failed: %s", record.name, slot.error)
            return None

        return slot.result

    def _disable(self, record: InterfaceRecord, reason: str):
        record.enabled = False
        self.timeouts += 1
        log.warning("Disabling Ethernet adapter %s.", record.name)
        log.debug("Adapter %s disabled: %s", record.name, reason)
