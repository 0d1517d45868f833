"""FastAPI application factory wiring configuration to the aggregator."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from containermetrics.adapters.frameworks.asgi import RequestLoggingMiddleware
from containermetrics.adapters.frameworks.fastapi import create_exporter_router
from containermetrics.adapters.registry.docker import DockerContainerRegistry
from containermetrics.config import ExporterConfig
from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.ports import ContainerRegistryPort

logger = logging.getLogger(__name__)


def create_aggregator(
    config: ExporterConfig, registry: ContainerRegistryPort
) -> MetricsAggregator:
    """Build a MetricsAggregator from configuration."""
    return MetricsAggregator(
        registry,
        config.label_key,
        default_scrape_target=config.default_scrape_target,
        probe_command=config.probe_command,
        probe_timeout=config.probe_timeout,
        max_concurrency=config.max_concurrent_probes,
    )


def create_app(
    config: ExporterConfig, registry: ContainerRegistryPort | None = None
) -> FastAPI:
    """Create the exporter application.

    Args:
        config: Exporter configuration.
        registry: Container registry to use. Defaults to the local Docker
            daemon.

    Returns:
        FastAPI app serving /metrics and /health. The registry is closed
        when the app shuts down.
    """
    if registry is None:
        registry = DockerContainerRegistry.from_env()
    aggregator = create_aggregator(config, registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Exporting metrics of containers labeled %s", config.label_key
        )
        yield
        await registry.close()
        logger.info("Container registry closed")

    app = FastAPI(title="containermetrics", lifespan=lifespan)
    app.include_router(create_exporter_router(aggregator))
    app.add_middleware(RequestLoggingMiddleware, exclude_paths=["/health"])
    app.state.aggregator = aggregator
    return app
