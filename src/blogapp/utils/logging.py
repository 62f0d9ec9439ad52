"""Logging configuration for BlogApp."""

import logging
import logging.config
import os
import sys


def configure_logging(level=None, format_string=None, config=None):
    """Configure logging for BlogApp.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
        config: An optional `dictConfig` mapping, applied after the basic setup
    """
    if level is None:
        level = os.environ.get("BLOGAPP_LOG_LEVEL", "INFO").upper()

    numeric_level = getattr(logging, level, logging.INFO)

    if format_string is None:
        if numeric_level == logging.DEBUG:
            format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        else:
            format_string = "%(asctime)s %(levelname)s: %(message)s"

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Replace any existing configuration
    )

    # Reduce verbosity of third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    if numeric_level == logging.DEBUG:
        logging.getLogger("blogapp").setLevel(logging.DEBUG)
    else:
        logging.getLogger("blogapp.adapters").setLevel(logging.WARNING)

    if config:
        logging.config.dictConfig({"version": 1, **config})
