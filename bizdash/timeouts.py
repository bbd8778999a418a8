"""
Timeout wrappers for backend calls.
Turns a hung request into a RequestTimeoutError instead of an endless spinner.
"""
import asyncio
import functools

from bizdash.config import REQUEST_TIMEOUT_SECONDS
from bizdash.errors import RequestTimeoutError


async def with_timeout(awaitable, timeout: float = REQUEST_TIMEOUT_SECONDS):
    """Await `awaitable`, raising RequestTimeoutError after `timeout` seconds."""
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise RequestTimeoutError(timeout) from exc


async def run_blocking(func, *args, timeout: float = REQUEST_TIMEOUT_SECONDS, **kwargs):
    """Run a synchronous backend call on a worker thread under a timeout."""
    call = functools.partial(func, *args, **kwargs)
    return await with_timeout(asyncio.to_thread(call), timeout)
