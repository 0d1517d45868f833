"""Core aggregation domain: models, ports, relabeling, probing."""

from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.exceptions import (
    ConfigError,
    ContainerMetricsError,
    DiscoveryError,
    RegistryError,
)
from containermetrics.core.models import (
    ContainerDescriptor,
    ExecHandle,
    ExecOutput,
    ProbeFailure,
    ProbeResult,
)
from containermetrics.core.ports import ContainerRegistryPort
from containermetrics.core.probe import ContainerProbe
from containermetrics.core.relabel import relabel_line, relabel_payload

__all__ = [
    "ConfigError",
    "ContainerDescriptor",
    "ContainerMetricsError",
    "ContainerProbe",
    "ContainerRegistryPort",
    "DiscoveryError",
    "ExecHandle",
    "ExecOutput",
    "MetricsAggregator",
    "ProbeFailure",
    "ProbeResult",
    "RegistryError",
    "relabel_line",
    "relabel_payload",
]
