"""Connectivity detection and reconnect notifications.

The offline queue is drained when the app first sees the network and every
time it comes back after being offline. ConnectivityWatcher polls a
ConnectivitySignal and fires a callback on those transitions.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

import httpx

from tareas.sentry import capture_exception

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30
DEFAULT_PROBE_TIMEOUT = 3.0


class ConnectivitySignal(ABC):
    @abstractmethod
    async def is_online(self) -> bool:
        ...


class StaticConnectivity(ConnectivitySignal):
    """Fixed answer, for tests and forced offline mode."""

    def __init__(self, online: bool = True):
        self.online = online

    async def is_online(self) -> bool:
        return self.online


class HttpConnectivityProbe(ConnectivitySignal):
    """Online when a HEAD request to the URL gets any HTTP response."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def is_online(self) -> bool:
        if self._client is None:
            self._client = httpx.AsyncClient()

        try:
            response = await self._client.head(self.url, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.debug(f"Connectivity probe to {self.url} timed out")
            return False
        except httpx.RequestError as e:
            logger.debug(f"Connectivity probe to {self.url} failed: {e}")
            return False

        logger.debug(f"Connectivity probe got HTTP {response.status_code}")
        return True

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class ConnectivityWatcher:
    """Polls a connectivity signal and calls back when the network is reachable.

    The callback runs after the first successful check and after every
    offline to online transition, never twice in a row while staying online.
    """

    def __init__(
        self,
        signal: ConnectivitySignal,
        on_online: Callable[[], Awaitable[None]],
        interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._signal = signal
        self._on_online = on_online
        self._interval = interval
        self._online: bool | None = None
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def online(self) -> bool | None:
        """Last observed state; None before the first check."""
        return self._online

    async def check(self) -> bool:
        """Poll once, firing the callback on a transition to online."""
        was_online = self._online
        self._online = await self._signal.is_online()

        if self._online and not was_online:
            logger.info("Network reachable")
            try:
                await self._on_online()
            except Exception as e:
                capture_exception(e)
                logger.error(f"Error in reconnect callback: {e}")
        elif was_online and not self._online:
            logger.info("Network lost")

        return self._online

    async def start(self) -> None:
        """Check immediately, then keep polling in the background."""
        if self._running:
            logger.warning("Connectivity watcher already running")
            return

        self._running = True
        logger.info(f"Starting connectivity watcher (interval: {self._interval}s)")
        await self.check()
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Connectivity watcher stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._interval)
                if self._running:
                    await self.check()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in connectivity loop: {e}")
