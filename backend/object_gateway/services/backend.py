import asyncio
import functools
from typing import Any, Callable, TypeVar

from object_gateway.core.errors import StorageError, translate_backend_error
from object_gateway.core.retry import RetryPolicy

T = TypeVar("T")


class BackendCaller:
    """Runs blocking boto3 calls off the event loop with a timeout.

    Failures come out as ``StorageError`` subclasses after the retry policy
    gives up.
    """

    def __init__(self, timeout: float, retry: RetryPolicy | None = None) -> None:
        self.timeout = timeout
        self.retry = retry or RetryPolicy()

    async def call(
        self,
        operation: str,
        key: str | None,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        bound = functools.partial(func, *args, **kwargs)

        async def _attempt() -> T:
            try:
                return await asyncio.wait_for(asyncio.to_thread(bound), self.timeout)
            except (asyncio.CancelledError, StorageError):
                raise
            except Exception as exc:
                raise translate_backend_error(exc, operation=operation, key=key) from exc

        return await self.retry.run(_attempt)
