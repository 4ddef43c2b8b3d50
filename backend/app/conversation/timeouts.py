"""Bounded waits around blocking provider calls."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, TypeVar

from app.conversation.errors import LLMTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_timeout(
    fn: Callable[..., T],
    *args: Any,
    timeout_seconds: float,
    operation: str = "provider call",
    **kwargs: Any,
) -> T:
    """Run a blocking call in a worker thread and give up after ``timeout_seconds``.

    On expiry the worker is abandoned (its result is discarded) and
    ``LLMTimeoutError`` is raised; no partial result is returned. Nothing is
    retried here.
    """

    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
    try:
        return await asyncio.wait_for(future, timeout=timeout_seconds)
    except LLMTimeoutError:
        # socket-level timeout raised by the client itself
        raise
    except asyncio.TimeoutError as exc:
        logger.warning("%s exceeded its %.1fs budget", operation, timeout_seconds)
        raise LLMTimeoutError(f"{operation} timed out after {timeout_seconds:g}s") from exc
