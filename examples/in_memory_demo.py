"""Example exporter serving scripted containers, no Docker daemon needed.

Run with:
    uvicorn examples.in_memory_demo:app --reload

Endpoints:
    /metrics    - merged metrics of the scripted containers
    /health     - liveness probe

The "payments" container always fails its fetch, so its metrics never
appear in /metrics; the failure only shows up in the logs.
"""

from containermetrics.adapters.logging import configure_logging
from containermetrics.adapters.registry.in_memory import InMemoryContainerRegistry
from containermetrics.app import create_app
from containermetrics.config import ExporterConfig
from containermetrics.core.models import ECS_CONTAINER_NAME_LABEL

LABEL_KEY = "prometheus.scrape"

registry = InMemoryContainerRegistry()
registry.add_container(
    "3f2a9c",
    {LABEL_KEY: "9100/metrics", ECS_CONTAINER_NAME_LABEL: "web"},
    stdout=(
        "# HELP http_requests_total Requests served\n"
        "# TYPE http_requests_total counter\n"
        'http_requests_total{method="GET",status="200"} 1027\n'
        'http_requests_total{method="POST",status="201"} 93\n'
    ),
)
registry.add_container(
    "8b41d0",
    {LABEL_KEY: "8080/stats", ECS_CONTAINER_NAME_LABEL: "worker"},
    stdout="# TYPE jobs_pending gauge\njobs_pending 4\n",
    # Simulate a slow in-container curl
    delay=0.2,
)
registry.add_container(
    "c07e55",
    {LABEL_KEY: "", ECS_CONTAINER_NAME_LABEL: "payments"},
    stderr="curl: (7) Failed to connect to localhost port 9100\n",
    exit_code=7,
)

configure_logging("DEBUG")
app = create_app(ExporterConfig(label_key=LABEL_KEY), registry=registry)
