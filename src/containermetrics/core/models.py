"""Core domain models for container metrics aggregation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Label set by the ECS agent on every task container
ECS_CONTAINER_NAME_LABEL = "com.amazonaws.ecs.container-name"
UNKNOWN_SERVICE_NAME = "unknown-service"

DEFAULT_SCRAPE_TARGET = "9100/metrics"
LOOPBACK_HOST = "localhost"
DEFAULT_PROBE_COMMAND = ("/bin/curl", "-s")

CONTAINER_LABEL_NAME = "container_name"


@dataclass(frozen=True)
class ContainerDescriptor:
    """A running container as reported by the container registry.

    Attributes:
        id: Container identifier, unique per running instance.
        labels: Container labels (key -> value).
    """

    id: str
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Identity injected into every metric line of this container."""
        return self.labels.get(ECS_CONTAINER_NAME_LABEL, UNKNOWN_SERVICE_NAME)

    def scrape_target(self, label_key: str, default: str) -> str:
        """Return the port-and-path to scrape inside this container.

        Args:
            label_key: Label whose value overrides the scrape target.
            default: Port-and-path used when the label is missing or empty.

        Returns:
            Port-and-path string such as "9100/metrics".
        """
        return self.labels.get(label_key) or default


@dataclass(frozen=True)
class ExecHandle:
    """Reference to an exec-style command created inside a container.

    Attributes:
        exec_id: Identifier assigned by the container runtime.
        container_id: Container the command is bound to.
        ref: Adapter-private object backing the handle.
    """

    exec_id: str
    container_id: str
    ref: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ExecOutput:
    """Captured output streams of a finished exec command."""

    stdout: bytes = b""
    stderr: bytes = b""


class ProbeFailure(Enum):
    """Why a container probe produced no payload."""

    CREATE_FAILED = "create_failed"
    START_FAILED = "start_failed"
    NON_ZERO_EXIT = "non_zero_exit"
    EMPTY_OUTPUT = "empty_output"
    TIMED_OUT = "timed_out"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of scraping one container.

    Attributes:
        container_id: Container that was probed.
        payload: Raw metrics text on success, None otherwise.
        failure: Failure kind when payload is None.
        exit_code: Exit code of the fetch command, if known.
        stderr: Decoded standard error of the fetch command.
    """

    container_id: str
    payload: str | None = None
    failure: ProbeFailure | None = None
    exit_code: int | None = None
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True if the probe produced a payload."""
        return self.payload is not None

    @classmethod
    def success(
        cls, container_id: str, payload: str, stderr: str = ""
    ) -> "ProbeResult":
        return cls(
            container_id=container_id, payload=payload, exit_code=0, stderr=stderr
        )

    @classmethod
    def failed(
        cls,
        container_id: str,
        failure: ProbeFailure,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> "ProbeResult":
        return cls(
            container_id=container_id,
            failure=failure,
            exit_code=exit_code,
            stderr=stderr,
        )
