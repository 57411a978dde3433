"""Prometheus metrics for gateway calls."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from prometheus_client import Counter, Histogram

from askdocs.utils.logging import GatewayCallLogger

gateway_latency_ms = Histogram(
    "gateway_latency_ms",
    "Managed service call latency in milliseconds",
    ["gateway", "operation", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000, 16000],
)

gateway_errors_total = Counter(
    "gateway_errors_total",
    "Total managed service call errors",
    ["gateway", "reason"],
)

_call_logger = GatewayCallLogger()


class PrometheusGatewayMetrics:
    """Prometheus-based gateway metrics implementation."""

    def record_latency(self, gateway: str, operation: str, outcome: str, latency_ms: float) -> None:
        """Record gateway call latency."""
        gateway_latency_ms.labels(gateway=gateway, operation=operation, outcome=outcome).observe(
            latency_ms
        )

    def inc_error(self, gateway: str, reason: str) -> None:
        """Increment error counter."""
        gateway_errors_total.labels(gateway=gateway, reason=reason).inc()


_metrics = PrometheusGatewayMetrics()


@contextmanager
def track_gateway_call(gateway: str, operation: str, **fields: Any) -> Iterator[None]:
    """Time a gateway call and report it to metrics and the structured log.

    Exceptions are recorded and re-raised unchanged.
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        reason = type(e).__name__
        _metrics.record_latency(gateway, operation, "error", latency_ms)
        _metrics.inc_error(gateway, reason)
        _call_logger.log_call(gateway, operation, "error", latency_ms, error_reason=reason, **fields)
        raise
    latency_ms = (time.perf_counter() - start) * 1000
    _metrics.record_latency(gateway, operation, "success", latency_ms)
    _call_logger.log_call(gateway, operation, "success", latency_ms, **fields)
