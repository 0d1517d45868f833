"""FastAPI adapter for the exporter endpoints."""

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from containermetrics.adapters.frameworks.asgi import PROMETHEUS_CONTENT_TYPE
from containermetrics.core.aggregator import MetricsAggregator
from containermetrics.core.exceptions import DiscoveryError


def create_exporter_router(aggregator: MetricsAggregator) -> APIRouter:
    """Create a FastAPI router with /metrics and /health endpoints.

    Args:
        aggregator: Aggregator invoked on every /metrics request.

    Returns:
        APIRouter with /metrics and /health endpoints configured.
    """
    router = APIRouter()

    @router.get("/health", response_class=PlainTextResponse)
    async def get_health() -> str:
        """Liveness probe."""
        return "OK"

    @router.get("/metrics")
    async def get_metrics() -> Response:
        """Return the merged metrics of all labeled containers."""
        try:
            body = await aggregator.aggregate()
        except DiscoveryError:
            return JSONResponse(
                {"error": "Container discovery failed"}, status_code=503
            )
        return Response(content=body, media_type=PROMETHEUS_CONTENT_TYPE)

    return router
