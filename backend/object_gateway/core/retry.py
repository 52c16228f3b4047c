import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from object_gateway.core.config import Settings
from object_gateway.core.errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff for retryable storage failures. Disabled by default."""

    enabled: bool = False
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            enabled=settings.retry_enabled,
            max_attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    @property
    def attempts(self) -> int:
        return max(1, self.max_attempts) if self.enabled else 1

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    async def run(self, call: Callable[[], Awaitable[T]]) -> T:
        max_attempts = self.attempts
        for attempt in range(1, max_attempts + 1):
            try:
                return await call()
            except StorageError as exc:
                if not exc.retryable or attempt >= max_attempts:
                    raise
                wait_seconds = self.delay_for(attempt)
                logger.warning(
                    "Storage %s failed for key %r (attempt %d/%d): %s. Retrying in %.2fs",
                    exc.operation,
                    exc.key,
                    attempt,
                    max_attempts,
                    exc,
                    wait_seconds,
                )
                await asyncio.sleep(wait_seconds)
        raise RuntimeError("retry loop exited without a result")  # pragma: no cover
