import time
import logging
from typing import Awaitable, Callable, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExpiringCache(Generic[T]):
    """
    Single value with an absolute expiry (epoch seconds).

    Refreshes are not serialized: two callers that both find the entry expired
    will both fetch, and the last write wins.
    """

    def __init__(self, name: str, clock: Callable[[], float] = time.time):
        self.name = name
        self.value: Optional[T] = None
        self.expires_at: float = 0.0
        self._clock = clock

    def is_valid(self, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return self.value is not None and self.expires_at > now

    def set(self, value: T, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at

    async def get_or_refresh(self, fetch: Callable[[], Awaitable[Tuple[T, float]]]) -> T:
        """Return the cached value, calling fetch() for (value, expires_at) if expired"""
        if self.is_valid():
            return self.value

        logger.debug(f"Refreshing cache entry {self.name}")
        value, expires_at = await fetch()
        self.set(value, expires_at)
        return value
