"""Bounded fan-out for read-only git queries."""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, TypeVar

from git_env_branches.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def get_worker_count(user_specified: Optional[int] = None, sequential: bool = False) -> int:
    """Number of workers for query fan-out.

    Args:
        user_specified: Worker count given by the user, if any
        sequential: Force a single worker

    Returns:
        Worker count, at least 1
    """
    if sequential:
        return 1
    if user_specified is not None and user_specified > 0:
        return user_specified

    # git queries are I/O bound subprocess calls
    cpu_count = os.cpu_count() or 1
    return min(32, cpu_count + 4)


def fan_out(func: Callable[[T], R], items: Iterable[T], workers: int) -> list[R]:
    """Apply ``func`` to every item using at most ``workers`` threads.

    Results keep the order of ``items``. Only read-only queries may be passed
    here, never anything that changes the working copy.
    """
    items = list(items)
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]

    max_workers = min(workers, len(items))
    logger.debug(f"Running {len(items)} queries on {max_workers} workers")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))
