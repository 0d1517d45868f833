"""Aggregation of labeled container metrics into a single payload."""

import asyncio
import logging
from collections.abc import Sequence

from containermetrics.core.exceptions import DiscoveryError, RegistryError
from containermetrics.core.models import (
    DEFAULT_PROBE_COMMAND,
    DEFAULT_SCRAPE_TARGET,
    ContainerDescriptor,
)
from containermetrics.core.ports import ContainerRegistryPort
from containermetrics.core.probe import ContainerProbe
from containermetrics.core.relabel import relabel_payload

logger = logging.getLogger(__name__)


class MetricsAggregator:
    """Scrapes every labeled container concurrently and merges the results.

    Each call to aggregate() is an independent pass: containers are
    discovered afresh, probed in parallel, and their relabeled output is
    concatenated in completion order. A failing container only removes its
    own lines from the payload.

    Example:
        ```python
        registry = DockerContainerRegistry.from_env()
        aggregator = MetricsAggregator(registry, "prometheus.scrape")
        payload = await aggregator.aggregate()
        ```
    """

    def __init__(
        self,
        registry: ContainerRegistryPort,
        label_key: str,
        *,
        default_scrape_target: str = DEFAULT_SCRAPE_TARGET,
        probe_command: Sequence[str] = DEFAULT_PROBE_COMMAND,
        probe_timeout: float | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            registry: Container registry used for discovery and probing.
            label_key: Label key marking containers that expose metrics.
            default_scrape_target: Port-and-path scraped when a container
                has no value for label_key.
            probe_command: In-container fetch command; URL is appended.
            probe_timeout: Seconds allowed per container probe (None: no limit).
            max_concurrency: Maximum probes in flight (None: one per container).
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.registry = registry
        self.label_key = label_key
        self.max_concurrency = max_concurrency
        self.probe = ContainerProbe(
            registry,
            label_key,
            default_scrape_target=default_scrape_target,
            command=probe_command,
            timeout=probe_timeout,
        )

    async def discover(self) -> list[ContainerDescriptor]:
        """List running containers carrying the discovery label.

        Raises:
            DiscoveryError: If the registry cannot be queried.
        """
        try:
            containers = await self.registry.list_containers(self.label_key)
        except RegistryError as e:
            logger.warning("Failed to get list of containers, e=%s", e)
            raise DiscoveryError(str(e)) from e
        logger.debug(
            "Found %d running containers matching label %s",
            len(containers),
            self.label_key,
        )
        return containers

    async def scrape(self, container: ContainerDescriptor) -> str | None:
        """Probe one container and relabel its payload.

        Returns:
            Relabeled metrics text, or None if the probe failed.
        """
        result = await self.probe.probe(container)
        if result.payload is None:
            return None
        return relabel_payload(result.payload, container.display_name)

    async def aggregate(self) -> str:
        """Run one aggregation pass over all labeled containers.

        Returns:
            Concatenated relabeled metrics of every container that answered.
            Empty string when no container matches.

        Raises:
            DiscoveryError: If container discovery fails.
        """
        containers = await self.discover()
        if not containers:
            return ""

        collected: list[str] = []
        semaphore = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency is not None
            else None
        )
        await asyncio.gather(
            *(self._collect(c, collected, semaphore) for c in containers)
        )
        logger.debug(
            "Collected metrics from %d of %d containers",
            len(collected),
            len(containers),
        )
        return "".join(_terminate(contribution) for contribution in collected)

    async def _collect(
        self,
        container: ContainerDescriptor,
        collected: list[str],
        semaphore: asyncio.Semaphore | None,
    ) -> None:
        """Scrape a container and append its contribution on success."""
        try:
            if semaphore is None:
                contribution = await self.scrape(container)
            else:
                async with semaphore:
                    contribution = await self.scrape(container)
        except Exception:
            logger.exception(
                "Failed to collect metrics from container=%s", container.id
            )
            return

        if contribution is None:
            logger.debug("Container=%s returned no metrics", container.id)
            return
        collected.append(contribution)


def _terminate(contribution: str) -> str:
    """Ensure a container's contribution ends with a line separator."""
    return contribution if contribution.endswith("\n") else contribution + "\n"
