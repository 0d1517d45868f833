"""Exception hierarchy for containermetrics."""


class ContainerMetricsError(Exception):
    """Base class for all containermetrics errors."""


class RegistryError(ContainerMetricsError):
    """A container runtime call failed.

    Attributes:
        operation: Registry operation that failed (e.g. "create_exec").
        container_id: Container involved, if any.
    """

    def __init__(
        self, operation: str, message: str, container_id: str | None = None
    ) -> None:
        self.operation = operation
        self.container_id = container_id
        super().__init__(f"{operation} failed: {message}")


class DiscoveryError(ContainerMetricsError):
    """Listing labeled containers failed; no payload can be produced."""


class ConfigError(ContainerMetricsError):
    """Configuration is missing or invalid.

    Attributes:
        key: Environment variable at fault.
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"{key}: {message}")
