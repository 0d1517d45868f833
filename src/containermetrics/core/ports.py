"""Port interface for the container registry.

The core depends only on this protocol, not on a concrete container runtime.
Adapters must raise RegistryError for every runtime failure.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from containermetrics.core.models import ContainerDescriptor, ExecHandle, ExecOutput


@runtime_checkable
class ContainerRegistryPort(Protocol):
    """Port for container discovery and in-container command execution.

    Examples: DockerContainerRegistry, InMemoryContainerRegistry.
    """

    async def list_containers(self, label_key: str) -> list[ContainerDescriptor]:
        """List running containers whose labels contain label_key.

        Args:
            label_key: Label key to filter on. Any value matches.

        Returns:
            Descriptors of the matching containers, in no particular order.
        """
        ...

    async def create_exec(
        self, container_id: str, cmd: Sequence[str]
    ) -> ExecHandle:
        """Create a command bound to a container, attached to stdout/stderr."""
        ...

    async def start_exec(self, handle: ExecHandle) -> ExecOutput:
        """Start a created command and capture its output until it exits."""
        ...

    async def inspect_exec(self, handle: ExecHandle) -> int | None:
        """Return the exit code of a finished command, None if unreported."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
