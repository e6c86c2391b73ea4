"""
Logging setup for the zombienet CLI.
"""

import logging
import os
from typing import MutableMapping, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEBUG_NAMESPACE = "zombie"


def configure_logging(level: str = "WARNING", debug: bool = False) -> None:
    """Configure root logging once per process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    if debug:
        logging.getLogger("zombienet").setLevel(logging.DEBUG)


def enable_debug_logging(environ: Optional[MutableMapping[str, str]] = None) -> None:
    """
    Turn on diagnostic logging for the rest of the process.

    Sets DEBUG=zombie so child processes see it too.
    """
    environ = os.environ if environ is None else environ
    environ["DEBUG"] = DEBUG_NAMESPACE
    logging.getLogger("zombienet").setLevel(logging.DEBUG)
