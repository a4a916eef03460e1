"""Logging setup for the command line."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGING_CONFIGURED = False


def cli_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Map the ``--verbose``/``--quiet`` flags to a level; quiet wins."""
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    return logging.INFO


def get_logger(
    name: Optional[str] = None, *, verbose: bool = False, quiet: bool = False
) -> logging.Logger:
    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")
        _LOGGING_CONFIGURED = True
    log = logging.getLogger(name)
    log.setLevel(cli_level(verbose=verbose, quiet=quiet))
    return log
