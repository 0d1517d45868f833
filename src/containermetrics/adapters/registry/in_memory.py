"""In-memory implementation of ContainerRegistryPort."""

import asyncio
import itertools
from collections.abc import Sequence
from dataclasses import dataclass, field

from containermetrics.core.exceptions import RegistryError
from containermetrics.core.models import ContainerDescriptor, ExecHandle, ExecOutput


@dataclass
class ScriptedContainer:
    """A fake container and the scripted outcome of commands run inside it.

    Attributes:
        descriptor: Container id and labels.
        stdout: Bytes every exec writes to standard output.
        stderr: Bytes every exec writes to standard error.
        exit_code: Exit code reported by inspect (None: unreported).
        create_error: Fail exec creation with this message.
        start_error: Fail exec start with this message.
        inspect_error: Fail exec inspection with this message.
        delay: Seconds start_exec sleeps before returning.
    """

    descriptor: ContainerDescriptor
    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int | None = 0
    create_error: str | None = None
    start_error: str | None = None
    inspect_error: str | None = None
    delay: float = 0.0
    commands: list[list[str]] = field(default_factory=list)


class InMemoryContainerRegistry:
    """In-memory implementation of ContainerRegistryPort.

    Containers and their command outcomes are scripted up front. Suitable
    for testing and local demos where no Docker daemon is available.
    """

    def __init__(self) -> None:
        self._containers: dict[str, ScriptedContainer] = {}
        self._exec_ids = itertools.count(1)
        self.list_error: str | None = None
        self.closed = False

    def add_container(
        self,
        container_id: str,
        labels: dict[str, str] | None = None,
        *,
        stdout: str | bytes = b"",
        stderr: str | bytes = b"",
        exit_code: int | None = 0,
        create_error: str | None = None,
        start_error: str | None = None,
        inspect_error: str | None = None,
        delay: float = 0.0,
    ) -> ScriptedContainer:
        """Register a running container and script its exec behaviour."""
        scripted = ScriptedContainer(
            descriptor=ContainerDescriptor(id=container_id, labels=labels or {}),
            stdout=stdout.encode() if isinstance(stdout, str) else stdout,
            stderr=stderr.encode() if isinstance(stderr, str) else stderr,
            exit_code=exit_code,
            create_error=create_error,
            start_error=start_error,
            inspect_error=inspect_error,
            delay=delay,
        )
        self._containers[container_id] = scripted
        return scripted

    def remove_container(self, container_id: str) -> None:
        """Stop tracking a container, as if it had exited."""
        self._containers.pop(container_id, None)

    def descriptor(self, container_id: str) -> ContainerDescriptor:
        """Return the descriptor of a registered container."""
        return self._containers[container_id].descriptor

    def commands_for(self, container_id: str) -> list[list[str]]:
        """Return every command executed in a container, oldest first."""
        return self._containers[container_id].commands

    async def list_containers(self, label_key: str) -> list[ContainerDescriptor]:
        """List containers whose labels contain label_key."""
        if self.list_error is not None:
            raise RegistryError("list_containers", self.list_error)
        return [
            c.descriptor
            for c in self._containers.values()
            if label_key in c.descriptor.labels
        ]

    async def create_exec(self, container_id: str, cmd: Sequence[str]) -> ExecHandle:
        """Record the command and hand out a new exec handle."""
        scripted = self._containers.get(container_id)
        if scripted is None:
            raise RegistryError("create_exec", "no such container", container_id)
        if scripted.create_error is not None:
            raise RegistryError("create_exec", scripted.create_error, container_id)
        scripted.commands.append(list(cmd))
        return ExecHandle(
            exec_id=f"exec-{next(self._exec_ids)}",
            container_id=container_id,
            ref=scripted,
        )

    async def start_exec(self, handle: ExecHandle) -> ExecOutput:
        """Return the scripted output, after the scripted delay."""
        scripted: ScriptedContainer = handle.ref
        if scripted.delay:
            await asyncio.sleep(scripted.delay)
        if scripted.start_error is not None:
            raise RegistryError("start_exec", scripted.start_error, handle.container_id)
        return ExecOutput(stdout=scripted.stdout, stderr=scripted.stderr)

    async def inspect_exec(self, handle: ExecHandle) -> int | None:
        """Return the scripted exit code."""
        scripted: ScriptedContainer = handle.ref
        if scripted.inspect_error is not None:
            raise RegistryError(
                "inspect_exec", scripted.inspect_error, handle.container_id
            )
        return scripted.exit_code

    async def close(self) -> None:
        """Mark the registry closed."""
        self.closed = True
