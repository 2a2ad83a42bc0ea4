# lxc_scheduler/metrics/source.py
"""Load telemetry used to place new containers."""

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

from lxc_scheduler.core.errors import MetricsUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostAddress:
    """Partial host record named by the metrics source."""
    ip: str


def pick_lowest_load(samples: Dict[str, float]) -> str:
    """
    Return the ip with the lowest load.

    Ties go to the lexicographically smallest ip so placement is reproducible.
    """
    if not samples:
        raise MetricsUnavailable("no load samples available")
    ip, _ = min(samples.items(), key=lambda item: (item[1], item[0]))
    return ip


def instance_to_ip(instance: str) -> str:
    """Strip the exporter port from a Prometheus instance label."""
    if instance.startswith("["):
        # [::1]:9100
        return instance[1:].split("]", 1)[0]
    if instance.count(":") == 1:
        return instance.split(":", 1)[0]
    return instance


class MetricsSource(ABC):
    @abstractmethod
    def get_lowest_load_host(self) -> HostAddress:
        """
        Name the host currently exhibiting the lowest load.
        Raises MetricsUnavailable when no answer can be given.
        """
        raise NotImplementedError


class StaticMetricsSource(MetricsSource):
    """Fixed load table, for tests and local runs without Prometheus."""

    def __init__(self, loads: Optional[Dict[str, float]] = None):
        self._loads: Dict[str, float] = dict(loads or {})
        self._lock = threading.Lock()

    def set_load(self, ip: str, load: float) -> None:
        with self._lock:
            self._loads[ip] = load

    def remove(self, ip: str) -> None:
        with self._lock:
            self._loads.pop(ip, None)

    def get_lowest_load_host(self) -> HostAddress:
        with self._lock:
            samples = dict(self._loads)
        return HostAddress(ip=pick_lowest_load(samples))


class PrometheusMetricsSource(MetricsSource):
    """
    Reads host load from the Prometheus HTTP API.

    The last sample set is reused for `poll_interval` seconds; a failed
    refresh is reported as MetricsUnavailable.
    """

    def __init__(
        self,
        base_url: str,
        query: str = "node_load1",
        poll_interval: float = 15.0,
        timeout: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.base_url = base_url.rstrip("/")
        self.query = query
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._clock = clock

        self._samples: Dict[str, float] = {}
        self._fetched_at: Optional[float] = None
        self._lock = threading.Lock()

    def get_lowest_load_host(self) -> HostAddress:
        samples = self._get_samples()
        ip = pick_lowest_load(samples)
        logger.info(f"[metrics] lowest load host {ip} ({samples[ip]})")
        return HostAddress(ip=ip)

    def _get_samples(self) -> Dict[str, float]:
        with self._lock:
            now = self._clock()
            if (
                self._fetched_at is not None
                and now - self._fetched_at < self.poll_interval
            ):
                return self._samples

            self._samples = self._fetch()
            self._fetched_at = now
            return self._samples

    def _fetch(self) -> Dict[str, float]:
        url = f"{self.base_url}/api/v1/query"
        try:
            response = requests.get(
                url,
                params={"query": self.query},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"[metrics] cannot reach {url}: {e}")
            raise MetricsUnavailable(f"metrics source unreachable: {e}") from e

        if response.status_code != 200:
            raise MetricsUnavailable(
                f"metrics query failed [{response.status_code}]: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MetricsUnavailable("metrics source returned invalid JSON") from e

        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise MetricsUnavailable(f"metrics query unsuccessful: {payload!r}")

        samples: Dict[str, float] = {}
        for series in payload.get("data", {}).get("result", []):
            instance = series.get("metric", {}).get("instance")
            value = series.get("value")
            if not instance or not value or len(value) < 2:
                continue
            try:
                load = float(value[1])
            except (TypeError, ValueError):
                continue
            if math.isnan(load):
                continue

            ip = instance_to_ip(instance)
            # several series for one host: keep the busiest
            samples[ip] = max(load, samples.get(ip, load))

        if not samples:
            raise MetricsUnavailable(f"no samples for query {self.query!r}")

        logger.debug(f"[metrics] fetched {len(samples)} samples")
        return samples
