"""containermetrics - merge the Prometheus metrics of labeled containers.

Discovers running Docker containers carrying a label, scrapes each one from
inside its own network namespace, tags every sample with the container's
name, and serves the merged result on a single /metrics endpoint.
"""

from containermetrics.adapters.registry import (
    DockerContainerRegistry,
    InMemoryContainerRegistry,
)
from containermetrics.config import ExporterConfig, load_config
from containermetrics.core import (
    ConfigError,
    ContainerDescriptor,
    ContainerMetricsError,
    ContainerProbe,
    ContainerRegistryPort,
    DiscoveryError,
    MetricsAggregator,
    ProbeFailure,
    ProbeResult,
    RegistryError,
    relabel_line,
    relabel_payload,
)

__all__ = [
    "ConfigError",
    "ContainerDescriptor",
    "ContainerMetricsError",
    "ContainerProbe",
    "ContainerRegistryPort",
    "DiscoveryError",
    "DockerContainerRegistry",
    "ExporterConfig",
    "InMemoryContainerRegistry",
    "MetricsAggregator",
    "ProbeFailure",
    "ProbeResult",
    "RegistryError",
    "load_config",
    "relabel_line",
    "relabel_payload",
]
