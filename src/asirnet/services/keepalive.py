"""Background pinger that keeps sibling deployments awake.

Free hosting tiers put idle services to sleep. The worker periodically issues
``GET <url>/health`` against every configured sibling so they stay warm. It
never raises into the application; failures are only logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx

from asirnet.core.settings import settings

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"


@dataclass
class PingResult:
    url: str
    ok: bool
    status_code: int | None = None
    error: str | None = None


@dataclass
class KeepAliveState:
    """Outcome of the most recent round, per target URL."""

    rounds: int = 0
    last_results: dict[str, PingResult] = field(default_factory=dict)


def health_url(base_url: str) -> str:
    return base_url.rstrip("/") + HEALTH_PATH


class KeepAliveWorker:
    """Periodically pings sibling deployments' health endpoints."""

    def __init__(
        self,
        urls: Sequence[str] | None = None,
        interval_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            urls: Base URLs to ping. Defaults to ``KEEPALIVE_URLS``.
            interval_seconds: Delay between rounds. Defaults to
                ``KEEPALIVE_INTERVAL_SECONDS``.
            client: Optional HTTP client; one is created (and owned) otherwise.
        """
        self.urls = list(urls if urls is not None else settings.keepalive_urls)
        self.interval = float(
            interval_seconds if interval_seconds is not None
            else settings.keepalive_interval_seconds
        )
        self._client = client
        self._owns_client = client is None
        self.state = KeepAliveState()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.keepalive_timeout_seconds)
        return self._client

    async def start(self) -> None:
        """Start the background loop."""
        if not self.urls:
            return

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop and release the HTTP client."""
        if self._task is not None:
            self._stopping.set()
            await self._task
            self._task = None
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _run(self) -> None:
        interval = max(0.1, self.interval)
        while not self._stopping.is_set():
            await self.ping_all()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue

    async def ping_all(self) -> list[PingResult]:
        """Ping every target once, concurrently."""
        results = await asyncio.gather(*(self.ping(url) for url in self.urls))
        self.state.rounds += 1
        self.state.last_results = {result.url: result for result in results}
        return list(results)

    async def ping(self, base_url: str) -> PingResult:
        url = health_url(base_url)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Keep-alive ping to %s failed: %s", url, e)
            return PingResult(url=base_url, ok=False, error=str(e))

        ok = response.is_success
        if ok:
            logger.debug("Keep-alive ping to %s returned %d", url, response.status_code)
        else:
            logger.warning("Keep-alive ping to %s returned %d", url, response.status_code)
        return PingResult(url=base_url, ok=ok, status_code=response.status_code)
