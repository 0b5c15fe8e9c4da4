"""
Base sampler interface.

A sampler is anything that can turn an adapter name into a CounterSample.
This keeps the rate engine decoupled from where the counters actually
come from (entstat on AIX, the mock generator, etc).
"""

from abc import ABC, abstractmethod
from typing import List

from netrate.metrics import CounterSample


class SamplerTimeout(Exception):
    """The underlying command did not finish within its execution timeout."""


class CounterSampler(ABC):
    """Interface for all counter sources."""

    @abstractmethod
    def sample(self, interface: str) -> CounterSample:
        """Fetch the four cumulative counters for one adapter."""
        ...

    @abstractmethod
    def enumerate(self) -> List[str]:
        """Adapter names currently in an available state, in device order."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
