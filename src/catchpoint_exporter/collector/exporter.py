"""
Prometheus side of the exporter.

CatchpointCollector plugs into a prometheus_client registry. Every time the
registry is gathered it runs a brand-new ScrapeCycle against Catchpoint and
hands the results over as gauge families, so each /metrics response is one
consistent scrape.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from catchpoint_exporter.collector.base import CatchpointAPI
from catchpoint_exporter.collector.scrape import ScrapeCycle
from catchpoint_exporter.config import Config
from catchpoint_exporter.metrics import METRICS, METRICS_BY_NAME, Observation

log = logging.getLogger(__name__)


def to_metric_families(observations: Iterable[Observation]) -> List[GaugeMetricFamily]:
    """Group observations into gauge families, in METRICS order.

    Families with no observations are left out. If the same label set shows
    up twice in one family (repeated alerts for a test/node pair), the last
    value wins so the exposition never has duplicate series.
    """
    samples: Dict[str, "OrderedDict[Tuple[str, ...], float]"] = {}
    for obs in observations:
        spec = METRICS_BY_NAME.get(obs.name)
        if spec is None:
            log.warning("Dropping observation for unknown metric %s", obs.name)
            continue
        samples.setdefault(spec.name, OrderedDict())[obs.label_values(spec)] = obs.value

    families = []
    for spec in METRICS:
        if spec.name not in samples:
            continue
        family = GaugeMetricFamily(spec.name, spec.help_text, labels=list(spec.labels))
        for label_values, value in samples[spec.name].items():
            family.add_metric(list(label_values), value)
        families.append(family)
    return families


class CatchpointCollector(Collector):

    def __init__(self, api: Optional[CatchpointAPI], config: Optional[Config]):
        self._api = api
        self._config = config

    def snapshot(self) -> List[Observation]:
        """Run one scrape and return the raw observations."""
        return ScrapeCycle(self._api, self._config).run()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        yield from to_metric_families(self.snapshot())

    def describe(self) -> Iterator[GaugeMetricFamily]:
        # Lets the registry check names without hitting the API on register()
        for spec in METRICS:
            yield GaugeMetricFamily(spec.name, spec.help_text, labels=list(spec.labels))

    def name(self) -> str:
        return self._api.name() if self._api else "unconfigured"


def build_registry(api: CatchpointAPI, config: Config) -> CollectorRegistry:
    """A fresh registry holding only the Catchpoint collector."""
    registry = CollectorRegistry()
    registry.register(CatchpointCollector(api, config))
    return registry
