"""
Metrics package for claimauthz.

Exposes Prometheus counters and histograms for authorization decisions.
"""

from .collector import AuthzMetrics, MetricConfig, create_metrics

__all__ = [
    'AuthzMetrics',
    'MetricConfig',
    'create_metrics',
]
