"""Injection of the container identity label into exposition lines."""

import logging

from containermetrics.core.models import CONTAINER_LABEL_NAME

logger = logging.getLogger(__name__)


def relabel_line(line: str, identity: str) -> str:
    """Add a container_name label to a single metrics line.

    Comment and blank lines pass through. A line with a label block gets
    the label prepended inside the block; a line without one gets a new
    block between metric name and value. Anything else is logged and
    returned as is.

    Args:
        line: One line of Prometheus text exposition.
        identity: Container identity used as the label value.

    Returns:
        The rewritten line. Never raises.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return line

    label = f"{CONTAINER_LABEL_NAME}={identity}"

    # Existing label block: ours goes first
    brace = line.find("{")
    if brace != -1:
        return f"{line[: brace + 1]}{label},{line[brace + 1 :]}"

    space = line.find(" ")
    if space != -1:
        return f"{line[:space]}{{{label}}}{line[space:]}"

    logger.info(
        "Unparsable metrics line, not attaching %s: %r", CONTAINER_LABEL_NAME, line
    )
    return line


def relabel_payload(text: str, identity: str) -> str:
    """Relabel every line of a metrics payload, preserving line order."""
    return "\n".join(relabel_line(line, identity) for line in text.split("\n"))
