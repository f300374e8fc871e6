"""
Prometheus metrics for claimauthz.

This module counts authorization decisions and times policy evaluation on a
private collector registry so several authorizers can coexist in one process.
"""

import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest


logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    namespace: str = "claimauthz"


class AuthzMetrics:
    """Metrics collector for authorization decisions."""

    def __init__(self, config: Optional[MetricConfig] = None,
                 registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            config: Metrics configuration
            registry: Prometheus registry to register with; a private one by default
        """
        self.config = config or MetricConfig()
        self.registry = registry or CollectorRegistry()

        self.decisions = Counter(
            f'{self.config.namespace}_decisions_total',
            'Total number of authorization decisions',
            ['allowed', 'policy'],
            registry=self.registry
        )

        self.evaluation_latency = Histogram(
            f'{self.config.namespace}_evaluation_duration_seconds',
            'Policy evaluation duration in seconds',
            ['policy'],
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
            registry=self.registry
        )

        logger.info("Authorization metrics initialized")

    def record_decision(self, allowed: bool, policy: str) -> None:
        """Record an authorization decision."""
        if not self.config.enabled:
            return

        self.decisions.labels(allowed="true" if allowed else "false", policy=policy).inc()
        logger.debug(f"Recorded authorization decision: {policy} -> {allowed}")

    @contextmanager
    def time_evaluation(self, policy: str) -> Iterator[None]:
        """Time a block of policy evaluation."""
        start = time.perf_counter()
        try:
            yield
        finally:
            if self.config.enabled:
                self.evaluation_latency.labels(policy=policy).observe(time.perf_counter() - start)

    def decision_count(self, allowed: bool, policy: str) -> float:
        """Current value of the decision counter for one label set."""
        value = self.registry.get_sample_value(
            f'{self.config.namespace}_decisions_total',
            {'allowed': "true" if allowed else "false", 'policy': policy}
        )
        return value or 0.0

    def export(self) -> str:
        """Export metrics in Prometheus text format."""
        return generate_latest(self.registry).decode('utf-8')


def create_metrics(enabled: bool = True) -> AuthzMetrics:
    """Create a metrics collector."""
    return AuthzMetrics(MetricConfig(enabled=enabled))
