"""
Idempotent Prometheus metric registration.

Importing a metrics module twice (uvicorn --reload, test collection)
would otherwise fail with "Duplicated timeseries in CollectorRegistry".
"""

from typing import Any, TypeVar

from prometheus_client import REGISTRY, Counter, Gauge, Histogram

MetricT = TypeVar("MetricT", Counter, Gauge, Histogram)


def _get_or_create(
    metric_cls: type[MetricT],
    name: str,
    doc: str,
    labels: list[str] | None = None,
    **kwargs: Any,
) -> MetricT:
    """
    Register a metric, or return the collector already registered as `name`.

    Args:
        metric_cls: Counter, Gauge or Histogram.
        name: Metric name.
        doc: Metric documentation.
        labels: Optional list of label names.
        **kwargs: Extra constructor arguments, e.g. histogram buckets.
    """
    try:
        return metric_cls(name, doc, labels or [], **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]  # type: ignore[return-value]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    return _get_or_create(Gauge, name, doc, labels)


def _get_or_create_histogram(
    name: str,
    doc: str,
    labels: list[str] | None = None,
    buckets: tuple[float, ...] | None = None,
) -> Histogram:
    if buckets:
        return _get_or_create(Histogram, name, doc, labels, buckets=buckets)
    return _get_or_create(Histogram, name, doc, labels)
