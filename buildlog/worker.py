"""
Bounded worker pool for log generation jobs.

Jobs run on a ThreadPoolExecutor off the request thread. The number of
jobs in flight (running + waiting) is capped at
``max_workers + queue_capacity``; a submit that cannot get a slot within
``submit_timeout`` seconds is rejected with SubmissionRejectedError instead
of being queued without bound or silently dropped.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from .errors import SubmissionRejectedError
from .utils.metrics import SimpleMetrics

logger = logging.getLogger(__name__)


class LogWorkerPool:
    """
    Runs log generation jobs on a bounded thread pool.

    Every job is wrapped so that an exception escaping it is logged and
    counted; it never reaches the pool threads.

    ``core_workers`` is validated and reported in stats() only; threads are
    started on demand up to ``max_workers`` whatever its value.

    Usage:
        pool = LogWorkerPool(core_workers=5, max_workers=10, queue_capacity=25)
        pool.start()
        pool.submit(job, build_id, task_id)
        pool.shutdown()
    """

    def __init__(
        self,
        core_workers: int = 5,
        max_workers: int = 10,
        queue_capacity: int = 25,
        thread_name_prefix: str = "BuildLogGen-",
        submit_timeout: float = 0.5,
        metrics: Optional[SimpleMetrics] = None,
    ) -> None:
        if core_workers <= 0:
            raise ValueError("core_workers must be greater than 0")
        if max_workers < core_workers:
            raise ValueError("max_workers must be >= core_workers")
        if queue_capacity < 0:
            raise ValueError("queue_capacity must not be negative")
        self._core_workers = core_workers
        self._max_workers = max_workers
        self._queue_capacity = queue_capacity
        self._thread_name_prefix = thread_name_prefix
        self._submit_timeout = submit_timeout
        self._metrics = metrics

        self._executor: Optional[ThreadPoolExecutor] = None
        self._slots = threading.BoundedSemaphore(max_workers + queue_capacity)
        self._state_lock = threading.Lock()
        self._in_flight = 0
        self._running = 0

    @property
    def capacity(self) -> int:
        return self._max_workers + self._queue_capacity

    @property
    def is_running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        with self._state_lock:
            if self._executor is not None:
                return
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix=self._thread_name_prefix,
            )
        logger.info(
            f"Started log worker pool: core_workers={self._core_workers}, "
            f"max_workers={self._max_workers}, queue_capacity={self._queue_capacity}"
        )

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """
        Schedule ``fn(*args, **kwargs)``.

        Raises:
            SubmissionRejectedError: pool not running, or no free slot
                within submit_timeout
        """
        executor = self._executor
        if executor is None:
            raise SubmissionRejectedError("Log worker pool is not running")

        if not self._slots.acquire(timeout=self._submit_timeout):
            self._count("tasks_rejected")
            raise SubmissionRejectedError(
                f"Log worker pool is saturated ({self.capacity} jobs in flight)"
            )

        with self._state_lock:
            self._in_flight += 1
        try:
            executor.submit(self._run, fn, args, kwargs)
        except RuntimeError as exc:
            # Executor shut down between the check above and the submit.
            self._release()
            self._count("tasks_rejected")
            raise SubmissionRejectedError(f"Log worker pool rejected job: {exc}") from exc
        self._count("tasks_submitted")

    def _run(self, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        with self._state_lock:
            self._running += 1
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.exception(f"Unhandled exception escaped log job {getattr(fn, '__name__', fn)}")
            self._count("job_errors")
        finally:
            with self._state_lock:
                self._running -= 1
            self._release()

    def _release(self) -> None:
        with self._state_lock:
            self._in_flight -= 1
        self._slots.release()

    def stats(self) -> Dict[str, int]:
        """Snapshot of pool occupancy."""
        with self._state_lock:
            in_flight = self._in_flight
            running = self._running
        return {
            "active": running,
            "queued": max(0, in_flight - running),
            "in_flight": in_flight,
            "capacity": self.capacity,
            "core_workers": self._core_workers,
            "max_workers": self._max_workers,
            "queue_capacity": self._queue_capacity,
        }

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs. Queued jobs still run to completion."""
        with self._state_lock:
            executor = self._executor
            self._executor = None
        if executor is None:
            return
        logger.info("Shutting down log worker pool")
        executor.shutdown(wait=wait)

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(name)

    def __enter__(self) -> "LogWorkerPool":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown(wait=True)
