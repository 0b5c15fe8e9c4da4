"""
Sampler for AIX Ethernet adapters. Runs `entstat <adapter>` and maps the
output into a CounterSample.

libperfstat only knows about adapters that have an IP address configured,
which rules out most Shared Ethernet Adapters on a VIOS. entstat reports
them regardless.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List

from netrate.collector.base import CounterSampler, SamplerTimeout
from netrate.collector.entstat_parser import parse_entstat_text, parse_lsdev_adapters
from netrate.config import CollectorConfig
from netrate.metrics import CounterSample

log = logging.getLogger(__name__)


class EntstatSampler(CounterSampler):

    def __init__(self, config: CollectorConfig):
        self._entstat = config.entstat_path
        self._lsdev = config.lsdev_path
        # Kill the child at the same deadline the fault isolator enforces,
        # so an abandoned worker thread doesn't outlive it for long
        self._timeout = config.sample_timeout

    def sample(self, interface: str) -> CounterSample:
        try:
            result = subprocess.run(
                [self._entstat, interface],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise SamplerTimeout(f"{self._entstat} {interface} timed out after {self._timeout}s") from e
        except OSError as e:
            log.warning("Could not run %s for %s: %s", self._entstat, interface, e)
            return CounterSample()

        if result.returncode != 0:
            log.debug("%s %s exited with %d: %s", self._entstat, interface,
                      result.returncode, result.stderr.strip())

        return parse_entstat_text(result.stdout)

    def enumerate(self) -> List[str]:
        try:
            result = subprocess.run(
                [self._lsdev, "-Cc", "adapter"],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            log.warning("Adapter enumeration failed: %s", e)
            return []

        names = parse_lsdev_adapters(result.stdout)
        log.info("Found %d available Ethernet adapters: %s", len(names), ", ".join(names))
        return names

    def name(self) -> str:
        return f"entstat ({self._entstat})"
