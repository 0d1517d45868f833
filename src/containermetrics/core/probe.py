"""Scraping a single container through an in-container fetch command."""

import asyncio
import logging
from collections.abc import Sequence

from containermetrics.core.exceptions import RegistryError
from containermetrics.core.models import (
    DEFAULT_PROBE_COMMAND,
    DEFAULT_SCRAPE_TARGET,
    LOOPBACK_HOST,
    ContainerDescriptor,
    ProbeFailure,
    ProbeResult,
)
from containermetrics.core.ports import ContainerRegistryPort

logger = logging.getLogger(__name__)


class ContainerProbe:
    """Fetches a container's own metrics endpoint from inside the container.

    The fetch runs as an exec command (curl by default) so the metrics
    port never has to be published on the host.
    """

    def __init__(
        self,
        registry: ContainerRegistryPort,
        label_key: str,
        default_scrape_target: str = DEFAULT_SCRAPE_TARGET,
        command: Sequence[str] = DEFAULT_PROBE_COMMAND,
        timeout: float | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            registry: Container registry used to run the fetch command.
            label_key: Label whose per-container value overrides the target.
            default_scrape_target: Port-and-path used without an override.
            command: Fetch command; the scrape URL is appended to it.
            timeout: Seconds allowed for one probe. None disables the limit.
        """
        self.registry = registry
        self.label_key = label_key
        self.default_scrape_target = default_scrape_target
        self.command = tuple(command)
        self.timeout = timeout

    def scrape_url(self, container: ContainerDescriptor) -> str:
        """Return the loopback URL of the container's metrics endpoint."""
        target = container.scrape_target(self.label_key, self.default_scrape_target)
        return f"http://{LOOPBACK_HOST}:{target}"

    async def probe(self, container: ContainerDescriptor) -> ProbeResult:
        """Scrape one container.

        Failures of any kind are logged and returned as a ProbeResult
        without payload; no exception reaches the caller.
        """
        try:
            return await asyncio.wait_for(self._run(container), self.timeout)
        except TimeoutError:
            logger.warning(
                "Probe timed out after %ss, container=%s", self.timeout, container.id
            )
            return ProbeResult.failed(container.id, ProbeFailure.TIMED_OUT)
        except Exception:
            logger.warning(
                "Unexpected error while probing container=%s",
                container.id,
                exc_info=True,
            )
            return ProbeResult.failed(container.id, ProbeFailure.UNEXPECTED_ERROR)

    async def _run(self, container: ContainerDescriptor) -> ProbeResult:
        cmd = [*self.command, self.scrape_url(container)]

        try:
            handle = await self.registry.create_exec(container.id, cmd)
        except RegistryError as e:
            logger.warning("Failed to create exec, container=%s, e=%s", container.id, e)
            return ProbeResult.failed(container.id, ProbeFailure.CREATE_FAILED)

        try:
            output = await self.registry.start_exec(handle)
        except RegistryError as e:
            logger.warning(
                "Failed to start exec=%s, container=%s, e=%s",
                handle.exec_id,
                container.id,
                e,
            )
            return ProbeResult.failed(container.id, ProbeFailure.START_FAILED)

        stderr = output.stderr.decode("utf-8", errors="replace")
        if stderr:
            logger.info(
                "Got stderr from exec=%s, container=%s: %r",
                handle.exec_id,
                container.id,
                stderr,
            )

        try:
            exit_code = await self.registry.inspect_exec(handle)
        except RegistryError as e:
            logger.warning(
                "Failed to get exit code for exec=%s, container=%s, e=%s",
                handle.exec_id,
                container.id,
                e,
            )
            exit_code = None

        if exit_code != 0:
            logger.warning(
                "Exit code for exec=%s in container=%s is %s",
                handle.exec_id,
                container.id,
                exit_code,
            )
            return ProbeResult.failed(
                container.id, ProbeFailure.NON_ZERO_EXIT, exit_code, stderr
            )

        if not output.stdout:
            logger.warning("Found no output for container=%s", container.id)
            return ProbeResult.failed(
                container.id, ProbeFailure.EMPTY_OUTPUT, exit_code, stderr
            )

        payload = output.stdout.decode("utf-8", errors="replace")
        return ProbeResult.success(container.id, payload, stderr)
