"""Release several resources together and aggregate their close failures."""

from __future__ import annotations

import logging
from typing import Callable, List

from ..errors import CloseError

Closer = Callable[[], object]


def close_all(*closers: Closer, what: str) -> None:
    """Call every closer, even after a failure, then raise one CloseError.

    Raises:
        CloseError: if any closer failed; ``errors`` lists each failure.
    """
    failures: List[BaseException] = []
    for closer in closers:
        try:
            closer()
        except Exception as exc:
            failures.append(exc)
    if failures:
        raise CloseError(f"close {what}", failures)


def close_quietly(closer: Closer, logger: logging.Logger, what: str, *, log: bool = True) -> bool:
    """Close a resource on a cleanup path, logging instead of raising.

    Returns:
        True when the closer succeeded.
    """
    try:
        closer()
    except Exception as exc:
        if log:
            logger.error("❌ %s: failed to close: %s", what, exc)
        return False
    if log:
        logger.debug("🍀 %s: closed", what)
    return True
