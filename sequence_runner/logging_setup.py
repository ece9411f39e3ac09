"""Central logging configuration.

All modules log through ``logging.getLogger(__name__)``; this installs a
single stderr handler so stdout stays free for the CLI's JSON output.
"""

import logging
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            "sequence_runner": {"level": level, "handlers": ["console"], "propagate": False},
            "urllib3": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(verbose: bool = False) -> None:
    """Configure sequence-runner logging.

    Calling it again only adjusts the level, so repeated CLI invocations in
    one process do not stack handlers.
    """
    level = "DEBUG" if verbose else "INFO"
    package_logger = logging.getLogger("sequence_runner")
    if package_logger.handlers:
        package_logger.setLevel(level)
        for handler in package_logger.handlers:
            handler.setLevel(level)
        return
    dictConfig(_dict_config(level))
