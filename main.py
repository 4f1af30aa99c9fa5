"""Entry point for the ReadRover application."""

import logging

from fasthtml.common import serve

from readrover.config import get_settings
from readrover.logging_config import setup_logging, quiet_third_party

logger = logging.getLogger("readrover.main")


def main():
    """Start the ReadRover FastHTML application."""
    settings = get_settings()
    setup_logging(settings)
    quiet_third_party()

    logger.info(f"Starting ReadRover on {settings.host}:{settings.port}")
    try:
        serve(appname='app', app='app', host=settings.host, port=settings.port, reload=False)
    except KeyboardInterrupt:
        logger.info("ReadRover interrupted by user")


if __name__ == "__main__":
    main()
