"""Startup entry point: configure logging, check settings, create tables."""

import asyncio
import logging

from microblog import __version__
from microblog.config import get_settings
from microblog.database import init_db

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def startup() -> list[str]:
    """Log the configuration, report warnings and make sure tables exist.

    Returns:
        The configuration warnings that were logged
    """
    settings = get_settings()
    logger.info("Starting %s v%s", settings.app_name, __version__)
    logger.info("Debug mode: %s", settings.debug)
    logger.info("Database: %s", settings.database_url.split("///")[-1])  # Hide path details

    warnings = settings.validate_runtime_config()
    if warnings:
        logger.warning("Configuration warnings:")
        for warning in warnings:
            logger.warning("  - %s", warning)
    else:
        logger.info("Configuration validation passed - no warnings")

    await init_db()
    logger.info("Startup complete")
    return warnings


def main() -> None:
    configure_logging(get_settings().debug)
    asyncio.run(startup())


if __name__ == "__main__":
    main()
