"""Process entry point.

Run with:
    DOCKER_LABEL_HAS_METRICS=prometheus.scrape python -m containermetrics

Endpoints:
    /metrics    - merged Prometheus text of all labeled containers
    /health     - liveness probe
"""

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from containermetrics.adapters.logging import configure_logging
from containermetrics.app import create_app
from containermetrics.config import load_config
from containermetrics.core.exceptions import ConfigError

logger = logging.getLogger("containermetrics")


def main() -> int:
    """Load configuration and serve until interrupted.

    Returns:
        Process exit status.
    """
    load_dotenv()
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error("Invalid configuration, exiting: %s", e)
        return 1

    configure_logging(config.log_level)
    app = create_app(config)
    # uvicorn installs SIGINT/SIGTERM handlers and runs the lifespan shutdown
    uvicorn.run(
        app,
        host=config.listen_host,
        port=config.listen_port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
