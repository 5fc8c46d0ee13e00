"""Bounded background queue for best-effort notifications (welcome emails)."""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Number of recent failures kept on the dispatcher for inspection.
MAX_RECORDED_FAILURES = 100


@dataclass
class NotificationFailure:
    """One failed notification, as recorded on the dispatcher's error channel."""

    name: str
    error: str
    failed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class _Job:
    name: str
    func: Callable[..., Any]
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class NotificationDispatcher:
    """
    Runs submitted callables on worker threads, decoupled from the request that queued them.

    submit() never blocks: when the queue is full the notification is dropped and
    logged. A job that raises is logged and appended to `failures`; nothing is
    retried and nothing propagates to the submitter. Jobs submitted after shutdown()
    are dropped the same way as on a full queue.
    """

    def __init__(self, max_queue_size: int = 100, workers: int = 1) -> None:
        self._queue: queue.Queue[_Job | None] = queue.Queue(maxsize=max_queue_size)
        self._workers = workers
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()
        self._stopped = False
        self.failures: deque[NotificationFailure] = deque(maxlen=MAX_RECORDED_FAILURES)

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        with self._lock:
            if self._threads:
                return
            self._stopped = False
            for i in range(self._workers):
                thread = threading.Thread(
                    target=self._run,
                    name=f"notification-worker-{i}",
                    daemon=True,
                )
                thread.start()
                self._threads.append(thread)
        logger.info("Notification dispatcher started: workers=%s", self._workers)

    def submit(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        """Queue func(*args, **kwargs). Returns False if the job was dropped."""
        if self._stopped:
            logger.warning("Notification dispatcher stopped; dropping %s", name)
            self._record_failure(name, "dispatcher stopped")
            return False
        try:
            self._queue.put_nowait(_Job(name=name, func=func, args=args, kwargs=kwargs))
        except queue.Full:
            logger.warning("Notification queue full; dropping %s", name)
            self._record_failure(name, "queue full")
            return False
        return True

    def join(self) -> None:
        """Block until every queued job has been processed (tests and shutdown)."""
        self._queue.join()

    def shutdown(self, timeout: float = 5.0) -> None:
        """Drain the queue, then stop the workers."""
        with self._lock:
            self._stopped = True
            threads = list(self._threads)
            self._threads = []
        for _ in threads:
            self._queue.put(None)
        for thread in threads:
            thread.join(timeout=timeout)
        logger.info("Notification dispatcher stopped")

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                job.func(*job.args, **job.kwargs)
            except Exception as e:
                logger.error(
                    "Notification failed",
                    extra={"notification": job.name, "reason": str(e)[:500]},
                )
                self._record_failure(job.name, str(e))
            finally:
                self._queue.task_done()

    def _record_failure(self, name: str, error: str) -> None:
        self.failures.append(NotificationFailure(name=name, error=error[:500]))
