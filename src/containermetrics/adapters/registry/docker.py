"""Docker implementation of ContainerRegistryPort backed by aiodocker."""

import json
from collections.abc import Sequence

import aiodocker
import aiohttp

from containermetrics.core.exceptions import RegistryError
from containermetrics.core.models import ContainerDescriptor, ExecHandle, ExecOutput

# Stream ids of the multiplexed attach protocol
_STDOUT = 1
_STDERR = 2

_RUNTIME_ERRORS = (aiodocker.DockerError, aiohttp.ClientError, OSError)


class DockerContainerRegistry:
    """Container registry talking to the local Docker daemon.

    The aiodocker client is created lazily on first use so the registry can
    be constructed outside of a running event loop.
    """

    def __init__(self, url: str | None = None) -> None:
        """Initialize the registry.

        Args:
            url: Docker daemon URL. None uses DOCKER_HOST or the default socket.
        """
        self._url = url
        self._client: aiodocker.Docker | None = None

    @classmethod
    def from_env(cls) -> "DockerContainerRegistry":
        """Create a registry using the environment's Docker settings."""
        return cls()

    def _get_client(self) -> aiodocker.Docker:
        """Get or create the aiodocker client."""
        if self._client is None:
            self._client = aiodocker.Docker(url=self._url)
        return self._client

    async def list_containers(self, label_key: str) -> list[ContainerDescriptor]:
        """List running containers carrying label_key."""
        filters = json.dumps({"label": [label_key], "status": ["running"]})
        try:
            containers = await self._get_client().containers.list(filters=filters)
        except _RUNTIME_ERRORS as e:
            raise RegistryError("list_containers", str(e)) from e

        return [
            ContainerDescriptor(id=c.id, labels=dict(c["Labels"] or {}))
            for c in containers
        ]

    async def create_exec(self, container_id: str, cmd: Sequence[str]) -> ExecHandle:
        """Create an exec attached to stdout and stderr."""
        client = self._get_client()
        try:
            container = client.containers.container(container_id)
            exec_ = await container.exec(list(cmd), stdout=True, stderr=True)
        except _RUNTIME_ERRORS as e:
            raise RegistryError("create_exec", str(e), container_id) from e
        return ExecHandle(exec_id=exec_.id, container_id=container_id, ref=exec_)

    async def start_exec(self, handle: ExecHandle) -> ExecOutput:
        """Start the exec and demultiplex its output until EOF."""
        stdout = bytearray()
        stderr = bytearray()
        try:
            async with handle.ref.start(detach=False) as stream:
                while (message := await stream.read_out()) is not None:
                    if message.stream == _STDOUT:
                        stdout.extend(message.data)
                    elif message.stream == _STDERR:
                        stderr.extend(message.data)
        except _RUNTIME_ERRORS as e:
            raise RegistryError("start_exec", str(e), handle.container_id) from e
        return ExecOutput(stdout=bytes(stdout), stderr=bytes(stderr))

    async def inspect_exec(self, handle: ExecHandle) -> int | None:
        """Return the exec's exit code."""
        try:
            info = await handle.ref.inspect()
        except _RUNTIME_ERRORS as e:
            raise RegistryError("inspect_exec", str(e), handle.container_id) from e
        exit_code = info.get("ExitCode")
        return int(exit_code) if exit_code is not None else None

    async def close(self) -> None:
        """Close the aiodocker session if one was opened."""
        if self._client is not None:
            await self._client.close()
            self._client = None
