"""
Shared bounded thread pool for blocking work (document extraction).

Request handlers hand blocking calls to this pool with a timeout so a hung
external tool cannot wedge the server.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from functools import lru_cache
from typing import Any, Callable

from config.settings import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=settings.MAX_WORKER_THREADS,
        thread_name_prefix="extract",
    )


def run_with_timeout(func: Callable[..., Any], *args, timeout: float, default: Any = None, **kwargs) -> Any:
    """
    Run `func` on the shared pool and wait at most `timeout` seconds.

    Returns `default` when the call times out. The worker thread itself is not
    interrupted; callees that shell out carry their own process timeout.
    """
    future = get_executor().submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning(f"{getattr(func, '__name__', func)} did not finish within {timeout}s")
        future.cancel()
        return default
