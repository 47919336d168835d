"""Background delivery of queued notifications.

A daemon thread calls ``tick`` every ``interval`` seconds.  Each tick
drains the queue completely; one task failing to send is logged and the
tick moves on to the next task.  A tick that starts while the previous
one is still delivering returns immediately: it is skipped, not deferred.
"""

from __future__ import annotations

from threading import Event, Lock, Thread

import structlog

from storefront.application.notifications import NotificationChannel, NotificationQueue

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0


class NotificationDispatcher:

    def __init__(
        self,
        queue: NotificationQueue,
        channel: NotificationChannel,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Dispatcher interval must be positive, got {interval}")
        self._queue = queue
        self._channel = channel
        self._interval = interval
        self._busy = False
        self._busy_guard = Lock()
        self._stop = Event()
        self._thread: Thread | None = None
        self.delivered = 0
        self.failed = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_busy(self) -> bool:
        return self._busy

    # --- Lifecycle ------------------------------------------------------------

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="notification-dispatcher", daemon=True)
        self._thread.start()
        logger.info("dispatcher.started", interval=self._interval)

    def stop(self, drain: bool = False, timeout: float | None = None) -> None:
        """Stop ticking; with ``drain`` deliver whatever is still queued first."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if drain:
            self.tick()
        logger.info("dispatcher.stopped", pending=self._queue.size())

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.tick()

    # --- Work -----------------------------------------------------------------

    def tick(self) -> int:
        """Drain the queue once; return how many tasks were delivered."""
        with self._busy_guard:
            if self._busy:
                logger.debug("dispatcher.tick_skipped")
                return 0
            self._busy = True

        delivered = 0
        try:
            while True:
                task = self._queue.pop()
                if task is None:
                    break
                try:
                    self._channel.send(task)
                except Exception:
                    self.failed += 1
                    logger.exception(
                        "dispatcher.delivery_failed",
                        order_id=task.order_id,
                        kind=task.kind.value,
                    )
                    continue
                delivered += 1
                self.delivered += 1
            if delivered:
                logger.info("dispatcher.drained", delivered=delivered)
        finally:
            with self._busy_guard:
                self._busy = False
        return delivered
