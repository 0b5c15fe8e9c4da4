"""Collector settings. The CLI fills these from options / NETRATE_* env vars."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_RESAMPLE_THRESHOLD = 5.0
DEFAULT_SAMPLE_TIMEOUT = 5.0


@dataclass
class CollectorConfig:
    resample_threshold: float = DEFAULT_RESAMPLE_THRESHOLD
    sample_timeout: float = DEFAULT_SAMPLE_TIMEOUT
    tmax: int = 60  # max seconds between reports, passed to the host
    entstat_path: str = "/usr/bin/entstat"
    lsdev_path: str = "/usr/sbin/lsdev"
    metric_group: str = "ibmnet"

    def validate(self) -> "CollectorConfig":
        if self.resample_threshold <= 0:
            raise ValueError(
                f"resample_threshold must be positive, got {self.resample_threshold}"
            )
        if self.sample_timeout <= 0:
            raise ValueError(f"sample_timeout must be positive, got {self.sample_timeout}")
        if self.tmax <= 0:
            raise ValueError(f"tmax must be positive, got {self.tmax}")
        return self
