# SPDX-License-Identifier: MIT

import sys

from loguru import logger

from notesync import configuration

LOG_FILE_NAME = "notesync.log"


def configure_logging(verbose: bool = False) -> None:
    """Route diagnostics to stderr and a rotating file in the user log directory."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> | {message}",
    )
    configuration.LOG_PATH.mkdir(parents=True, exist_ok=True)
    logger.add(
        configuration.LOG_PATH / LOG_FILE_NAME,
        level="DEBUG",
        rotation="1 MB",
        retention=5,
        enqueue=False,
    )
