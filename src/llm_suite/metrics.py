"""Метрики Prometheus (локальный registry)."""

from prometheus_client import CollectorRegistry, Counter, Histogram

registry = CollectorRegistry()

provider_requests_total = Counter(
    "provider_requests_total",
    "Total number of provider requests",
    ["vendor", "endpoint", "status"],
    registry=registry,
)

provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Provider request latency in seconds",
    ["vendor", "endpoint"],
    registry=registry,
)

tokens_total = Counter(
    "tokens_total",
    "Total tokens",
    ["vendor", "model", "kind"],
    registry=registry,
)
