import asyncio
import logging
from typing import Awaitable, TypeVar

from fastapi import Request

logger = logging.getLogger(__name__)

# nginx convention; the client never sees it
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_SECONDS = 0.1

T = TypeVar("T")


class ClientDisconnected(Exception):
    """The client went away before the response was ready."""


async def cancel_on_disconnect(request: Request, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable``, cancelling it as soon as the client disconnects.

    Starlette only notices a disconnect when the request's receive channel is
    read, so the channel is polled while the work is still pending.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                logger.info("Client disconnected from %s; work cancelled", request.url.path)
                raise ClientDisconnected(request.url.path)
    finally:
        if not task.done():
            task.cancel()
