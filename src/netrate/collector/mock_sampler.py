"""
Sampler that reads from the mock entstat generator.
Used for local development on machines that aren't AIX.
"""

from typing import Iterable, List

from netrate.collector.base import CounterSampler
from netrate.collector.entstat_parser import parse_entstat_text, parse_lsdev_adapters
from netrate.metrics import CounterSample
from netrate.mock.generator import DEFAULT_ADAPTERS, MockEntstat


class MockSampler(CounterSampler):
    """Wraps the mock generator as a standard sampler."""

    def __init__(self, seed: int = 42, adapters: Iterable[str] = DEFAULT_ADAPTERS,
                 hang: Iterable[str] = ()):
        self.server = MockEntstat(seed=seed, adapters=adapters, hang=hang)

    def sample(self, interface: str) -> CounterSample:
        return parse_entstat_text(self.server.render(interface))

    def enumerate(self) -> List[str]:
        return parse_lsdev_adapters(self.server.lsdev())

    def name(self) -> str:
        return "Mock entstat (simulated VIOS shared Ethernet adapters)"

    def close(self):
        self.server.release()
