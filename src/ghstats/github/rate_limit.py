"""GitHub API rate limit tracking and the retry-once transport stage."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

MIN_BACKOFF_SECONDS = 60


class RateLimitMonitor:
    """Tracks the quota reported by ``X-RateLimit-*`` response headers."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._remaining: int | None = None
        self._reset_at: int | None = None
        self._clock = clock
        self._sleep = sleep

    @property
    def remaining(self) -> int | None:
        return self._remaining

    @property
    def reset_at(self) -> int | None:
        return self._reset_at

    def update(self, response: httpx.Response) -> None:
        """Record rate limit headers from a response, if present."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._remaining = int(remaining)
        if reset is not None:
            self._reset_at = int(float(reset))

    @staticmethod
    def is_exhausted(response: httpx.Response) -> bool:
        return (
            response.status_code == 403
            and response.headers.get("X-RateLimit-Remaining") == "0"
        )

    def backoff_seconds(self, response: httpx.Response) -> int:
        """Seconds to wait before retrying, never less than a minute."""
        reset = int(float(response.headers.get("X-RateLimit-Reset") or 0))
        return max(MIN_BACKOFF_SECONDS, reset - int(self._clock()))

    async def wait(self, seconds: float) -> None:
        await self._sleep(seconds)


class RateLimitTransport(httpx.AsyncBaseTransport):
    """Wraps a transport, sleeping out an exhausted quota and replaying once.

    Every response passes through :meth:`RateLimitMonitor.update`. A 403 with
    zero remaining quota makes the stage wait until the reset time (at least
    60 seconds) and send the same request again. The second response is
    returned as-is, whatever its status.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport, monitor: RateLimitMonitor) -> None:
        self._transport = transport
        self._monitor = monitor

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await self._transport.handle_async_request(request)
        self._monitor.update(response)
        if not self._monitor.is_exhausted(response):
            return response

        wait_seconds = self._monitor.backoff_seconds(response)
        logger.warning(
            "GitHub API rate limit reached, waiting %d seconds before retry...",
            wait_seconds,
        )
        await response.aclose()
        await self._monitor.wait(wait_seconds)

        response = await self._transport.handle_async_request(request)
        self._monitor.update(response)
        return response

    async def aclose(self) -> None:
        await self._transport.aclose()
