"""Environment-driven configuration for the exporter.

load_config() never exits the process: invalid configuration raises
ConfigError and the entry point decides what to do with it.
"""

import math
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass

from containermetrics.core.exceptions import ConfigError
from containermetrics.core.models import DEFAULT_PROBE_COMMAND, DEFAULT_SCRAPE_TARGET

LABEL_KEY_VAR = "DOCKER_LABEL_HAS_METRICS"

DEFAULT_LISTEN_HOST = "0.0.0.0"
DEFAULT_LISTEN_PORT = 8080
DEFAULT_PROBE_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ExporterConfig:
    """Runtime settings of the exporter.

    Attributes:
        label_key: Label marking containers to scrape; its value, when set,
            overrides the scrape target of that container.
        listen_host: Address the HTTP server binds to.
        listen_port: Port the HTTP server listens on.
        default_scrape_target: Port-and-path scraped without an override.
        probe_command: In-container fetch command, URL appended.
        probe_timeout: Seconds per container probe, None for no limit.
        max_concurrent_probes: Bound on probes in flight, None for unbounded.
        log_level: Root log level name.
    """

    label_key: str
    listen_host: str = DEFAULT_LISTEN_HOST
    listen_port: int = DEFAULT_LISTEN_PORT
    default_scrape_target: str = DEFAULT_SCRAPE_TARGET
    probe_command: tuple[str, ...] = DEFAULT_PROBE_COMMAND
    probe_timeout: float | None = DEFAULT_PROBE_TIMEOUT
    max_concurrent_probes: int | None = None
    log_level: str = DEFAULT_LOG_LEVEL


def _get(environ: Mapping[str, str], key: str) -> str | None:
    """Return a stripped variable, or None if unset or blank."""
    value = environ.get(key, "").strip()
    return value or None


def _parse_int(environ: Mapping[str, str], key: str, low: int, high: int) -> int | None:
    raw = _get(environ, key)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(key, f"expected an integer, got {raw!r}") from None
    if not low <= value <= high:
        raise ConfigError(key, f"must be between {low} and {high}, got {value}")
    return value


def _parse_timeout(environ: Mapping[str, str], key: str) -> float | None:
    raw = _get(environ, key)
    if raw is None:
        return DEFAULT_PROBE_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(key, f"expected a number, got {raw!r}") from None
    if value < 0 or not math.isfinite(value):
        raise ConfigError(key, f"must be a finite non-negative number, got {raw!r}")
    return value or None


def load_config(environ: Mapping[str, str] | None = None) -> ExporterConfig:
    """Build an ExporterConfig from environment variables.

    Args:
        environ: Variables to read. Defaults to os.environ.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If a required variable is missing or a value is invalid.
    """
    if environ is None:
        environ = os.environ

    label_key = _get(environ, LABEL_KEY_VAR)
    if label_key is None:
        raise ConfigError(LABEL_KEY_VAR, "missing mandatory config key")

    probe_command = DEFAULT_PROBE_COMMAND
    raw_command = _get(environ, "PROBE_COMMAND")
    if raw_command is not None:
        try:
            probe_command = tuple(shlex.split(raw_command))
        except ValueError as e:
            raise ConfigError("PROBE_COMMAND", str(e)) from e

    log_level = (_get(environ, "LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigError("LOG_LEVEL", f"unknown level {log_level!r}")

    listen_port = _parse_int(environ, "LISTEN_PORT", 1, 65535)

    return ExporterConfig(
        label_key=label_key,
        listen_host=_get(environ, "LISTEN_HOST") or DEFAULT_LISTEN_HOST,
        listen_port=listen_port if listen_port is not None else DEFAULT_LISTEN_PORT,
        default_scrape_target=(
            _get(environ, "DEFAULT_SCRAPE_TARGET") or DEFAULT_SCRAPE_TARGET
        ),
        probe_command=probe_command,
        probe_timeout=_parse_timeout(environ, "PROBE_TIMEOUT_SECONDS"),
        max_concurrent_probes=_parse_int(
            environ, "MAX_CONCURRENT_PROBES", 1, 10_000
        ),
        log_level=log_level,
    )
