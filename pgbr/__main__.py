# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Run the pgbr HTTP server.

    python -m pgbr

Settings come from the environment, see pgbr.env.load_settings_from_env().
"""

import sys

import structlog
import uvicorn

from pgbr.env import load_settings_from_env
from pgbr.exceptions import ConfigurationError
from pgbr.integrations.fastapi import create_app
from pgbr.log import configure_logging

logger = structlog.get_logger()


def main() -> int:
    try:
        settings = load_settings_from_env()
    except ConfigurationError as e:
        configure_logging()
        logger.critical("configuration_invalid", error=str(e))
        return 1

    configure_logging(settings.log_level, settings.log_format)

    logger.info(
        "listening",
        host=settings.listen_host,
        port=settings.listen_port,
    )
    uvicorn.run(
        create_app(settings),
        host=settings.listen_host,
        port=settings.listen_port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
