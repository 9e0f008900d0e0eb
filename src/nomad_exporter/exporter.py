"""
Prometheus collector for the Nomad health endpoint.

Every poll of /metrics calls collect(), which scrapes the upstream once
and translates the payload onto a fixed set of gauges. Two of them are
labeled by status code and grow lazily as new codes show up:

- request_count_current is an instantaneous distribution, so every known
  code is reset to 0 before the new counts are applied.
- request_count_total is a running total, so a code that disappears keeps
  its last value instead of dropping back to 0.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List

from prometheus_client import Gauge
from prometheus_client.metrics_core import Metric

from nomad_exporter.collector.base import HealthSource
from nomad_exporter.exceptions import ScrapeError

log = logging.getLogger(__name__)

NAMESPACE = "nomad"
STATUS_CODE_LABEL = "statusCode"


def _escape_label_value(value: str) -> str:
    return value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r'\"')


def _sample_key(name: str, labels: Dict[str, str]) -> str:
    if not labels:
        return name
    rendered = ",".join(f'{k}="{_escape_label_value(v)}"' for k, v in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


class NomadExporter:
    """Custom collector; register it on a CollectorRegistry to expose it."""

    def __init__(self, source: HealthSource, namespace: str = NAMESPACE):
        self._source = source
        # Re-entrant so scrape() can be called on its own or from collect()
        self._lock = threading.RLock()

        def gauge(name, help_text, labelnames=()):
            return Gauge(name, help_text, labelnames, namespace=namespace, registry=None)

        self._up = gauge("up", "Is Nomad up ?")
        self._uptime = gauge("uptime", "Current Nomad uptime")
        self._response_time_total = gauge(
            "request_response_time_total", "Total response time of Nomad requests"
        )
        self._response_time_avg = gauge(
            "request_response_time_avg", "Average response time of Nomad requests"
        )
        self._count_current = gauge(
            "request_count_current", "Number of request handled by Nomad", [STATUS_CODE_LABEL]
        )
        self._count_total = gauge(
            "request_count_total", "Number of request handled by Nomad", [STATUS_CODE_LABEL]
        )

        # status code -> child gauge, never evicted
        self._current_by_code: Dict[str, Gauge] = {}
        self._total_by_code: Dict[str, Gauge] = {}

        # Down until the first successful scrape
        self._up.set(0)

    @property
    def source(self) -> HealthSource:
        return self._source

    def _instruments(self) -> List[Gauge]:
        return [
            self._up,
            self._uptime,
            self._response_time_total,
            self._response_time_avg,
            self._count_current,
            self._count_total,
        ]

    def describe(self) -> List[Metric]:
        """Descriptors for every family. Never touches the upstream."""
        descriptors: List[Metric] = []
        for instrument in self._instruments():
            descriptors.extend(instrument.describe())
        return descriptors

    def collect(self) -> List[Metric]:
        """Scrape once and return the current metric families.

        On a failed scrape only nomad_up is returned; the other gauges keep
        their last values but are left out of this poll.
        """
        with self._lock:
            try:
                self.scrape()
            except ScrapeError as e:
                log.error("%s", e)
                return self._up.collect()

            families: List[Metric] = []
            for instrument in self._instruments():
                families.extend(instrument.collect())
            return families

    def scrape(self):
        """Fetch one reading and apply it. Raises ScrapeError, leaving every
        gauge except nomad_up untouched."""
        with self._lock:
            try:
                health = self._source.fetch()
            except ScrapeError:
                self._up.set(0)
                raise

            self._up.set(1)
            self._uptime.set(health.uptime_sec)
            self._response_time_total.set(health.total_response_time_sec)
            self._response_time_avg.set(health.average_response_time_sec)

            # Codes missing from this reading must read 0, not their stale count
            for child in self._current_by_code.values():
                child.set(0)
            for code, count in health.status_code_count.items():
                if code not in self._current_by_code:
                    self._current_by_code[code] = self._count_current.labels(code)
                self._current_by_code[code].set(count)

            for code, count in health.total_status_code_count.items():
                if code not in self._total_by_code:
                    self._total_by_code[code] = self._count_total.labels(code)
                self._total_by_code[code].set(count)

            log.debug(
                "Scraped %s: %d current codes, %d total codes",
                self._source.name(),
                len(health.status_code_count),
                len(health.total_status_code_count),
            )

    def snapshot(self) -> Dict[str, float]:
        """Current value of every sample, keyed like the exposition format.
        Does not scrape."""
        values: Dict[str, float] = {}
        with self._lock:
            for instrument in self._instruments():
                for family in instrument.collect():
                    for sample in family.samples:
                        values[_sample_key(sample.name, sample.labels)] = sample.value
        return values
