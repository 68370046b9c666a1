"""
Client disconnect handling.

Runs a request's work as a task and cancels it when the HTTP client goes
away, so an abandoned question stops its retrieval and model calls.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import Request

logger = logging.getLogger(__name__)

T = TypeVar("T")

CLIENT_CLOSED_REQUEST = 499


class ClientDisconnectedError(Exception):
    """Raised when the caller disconnected before the work finished."""


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = 0.5,
) -> T:
    """
    Await work, cancelling it if the client disconnects first.

    Args:
        request: Incoming request to watch
        work: Coroutine producing the response payload
        poll_interval: Seconds between disconnect checks

    Returns:
        T: Result of work

    Raises:
        ClientDisconnectedError: Client went away and work was cancelled
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(f"{__name__}:run_until_disconnected - Client disconnected, cancelling")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                raise ClientDisconnectedError("Client disconnected")
    finally:
        if not task.done():
            task.cancel()
