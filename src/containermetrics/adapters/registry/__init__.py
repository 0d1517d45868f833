"""Container registry adapters implementing ContainerRegistryPort."""

from containermetrics.adapters.registry.docker import DockerContainerRegistry
from containermetrics.adapters.registry.in_memory import (
    InMemoryContainerRegistry,
    ScriptedContainer,
)

__all__ = [
    "DockerContainerRegistry",
    "InMemoryContainerRegistry",
    "ScriptedContainer",
]
