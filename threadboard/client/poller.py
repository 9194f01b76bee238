"""Background polling of the unread notification count."""

import asyncio
import contextlib
import inspect
from collections.abc import Awaitable, Callable

import structlog

from threadboard.config.settings import get_settings


logger = structlog.get_logger(__name__)

NewNotificationsCallback = Callable[[int, int], Awaitable[None] | None]


class UnreadCountPoller:
    """Polls an unread-count source on a fixed interval.

    The first successful poll only records a baseline. Later polls call
    `on_new(count, previous)` when the count has gone up. Poll failures are
    logged and the loop keeps going until `stop()` cancels it.
    """

    def __init__(
        self,
        fetch_count: Callable[[], Awaitable[int]],
        on_new: NewNotificationsCallback | None = None,
        interval_seconds: float | None = None,
    ):
        self._fetch_count = fetch_count
        self._on_new = on_new
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else get_settings().client_poll_interval_seconds
        )
        self.last_count: int | None = None
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background polling task."""
        if self._running:
            logger.warning("unread_poller_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(
            self._worker_loop(),
            name="unread_count_poller",
        )
        logger.info("unread_poller_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the polling task and forget the baseline."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            # CancelledError is expected when cancelling the task
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        self.last_count = None
        logger.info("unread_poller_stopped")

    async def poll_once(self) -> int:
        """Fetch the count once and fire the callback if it increased."""
        count = await self._fetch_count()
        previous = self.last_count
        self.last_count = count

        if previous is not None and count > previous and self._on_new is not None:
            result = self._on_new(count, previous)
            if inspect.isawaitable(result):
                await result

        return count

    async def _worker_loop(self) -> None:
        """Main polling loop."""
        while self._running:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("unread_poll_failed", error=str(e))

            await asyncio.sleep(self.interval_seconds)
