"""Prometheus metrics for resource resolution."""

from typing import Optional
from prometheus_client import Counter, Histogram, Gauge

# Lookup metrics
RESOURCE_LOOKUPS_TOTAL = Counter(
    'resource_lookups_total',
    'Total number of resource lookups',
    ['provider', 'outcome']  # outcome can be 'found', 'missing' or 'unknown_provider'
)

RESOURCE_LOOKUP_LATENCY = Histogram(
    'resource_lookup_latency_seconds',
    'Time spent resolving a resource path in seconds',
    ['provider']
)

# Development mode metrics
DEVELOPMENT_OVERRIDES_TOTAL = Counter(
    'development_overrides_total',
    'Development root overrides attempted at registration time',
    ['provider', 'status']  # status can be 'applied', 'missing_directory', 'unsupported' or 'error'
)

REGISTERED_PROVIDERS = Gauge(
    'registered_resource_providers',
    'Number of resource providers currently registered'
)

# Label used for lookups that scan every provider
ANY_PROVIDER = "*"
# Single label for lookups naming an unregistered provider; request-supplied
# names never become label values
UNKNOWN_PROVIDER = "unknown"

# Helper functions for tracking metrics

def record_lookup(
    provider: Optional[str],
    outcome: str,
    start_time: float,
    end_time: float,
) -> None:
    """
    Record metrics for a resource lookup.

    Args:
        provider: The provider asked, or None for a lookup across all providers
        outcome: 'found', 'missing' or 'unknown_provider'
        start_time: Lookup start time (time.perf_counter())
        end_time: Lookup end time (time.perf_counter())
    """
    label = provider or ANY_PROVIDER
    RESOURCE_LOOKUPS_TOTAL.labels(provider=label, outcome=outcome).inc()
    RESOURCE_LOOKUP_LATENCY.labels(provider=label).observe(end_time - start_time)

def record_development_override(provider: str, status: str) -> None:
    """Record the outcome of a development root override for a provider."""
    DEVELOPMENT_OVERRIDES_TOTAL.labels(provider=provider, status=status).inc()

def set_registered_providers(count: int) -> None:
    REGISTERED_PROVIDERS.set(count)
