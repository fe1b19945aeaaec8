"""Run ordered fallback strategies until one produces a result."""

import logging
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from tabroom_errors import ExtractionEmpty, NotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_success(
    strategies: Sequence[Callable[..., Optional[T]]],
    *args,
    label: str = "lookup",
) -> Tuple[Optional[T], Optional[str]]:
    """
    Call each strategy in order with *args; stop at the first usable result.

    A strategy signals a miss by returning None or raising NotFound /
    ExtractionEmpty. Misses are logged and the next strategy runs; a strategy
    is never retried. Any other error propagates.

    Returns:
        Tuple of (result, strategy_name), or (None, None) when all missed.
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            result = strategy(*args)
        except (NotFound, ExtractionEmpty) as e:
            logger.info("%s: %s missed (%s)", label, name, e.message)
            continue
        if result is None:
            logger.info("%s: %s found nothing", label, name)
            continue
        logger.info("%s: resolved by %s", label, name)
        return result, name
    logger.info("%s: all %d strategies exhausted", label, len(strategies))
    return None, None
