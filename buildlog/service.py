"""
Log generation orchestrator.

Request flow:
    initiate(identifier)  -> resolve build, PENDING record, submit job, return handle
    worker job            -> re-resolve build, render, write file, COMPLETED / FAILED
    get_status(handle)    -> registry lookup
    get_file(handle)      -> gate on status, verify the file is still on disk

initiate() never waits for the job. A nonexistent build fails before any
record or job is created. There is no cancellation and no job timeout: a
PENDING task stays PENDING until its job finishes.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .catalog import BuildLookup, resolve_build
from .content import build_log_content
from .errors import InvalidInputError, NotFoundError, SubmissionRejectedError
from .registry import TaskStatusRegistry
from .storage import LogFileStore, download_filename
from .types import Identifier, TaskState, TaskStatus
from .utils.metrics import SimpleMetrics
from .worker import LogWorkerPool

logger = logging.getLogger(__name__)

BUILD_VANISHED_MESSAGE = "Build not found during generation."


@dataclass
class LogFileResult:
    """Outcome of a file request: either still in progress or a readable file."""
    task_id: str
    in_progress: bool
    path: Optional[Path] = None
    filename: Optional[str] = None


def normalize_task_id(task_id: str) -> str:
    """Return the canonical UUID text of ``task_id``.

    Raises:
        InvalidInputError: if ``task_id`` is not a UUID
    """
    try:
        return str(uuid.UUID(str(task_id)))
    except (ValueError, TypeError, AttributeError):
        raise InvalidInputError(f"Invalid task ID format: '{task_id}'") from None


class BuildLogService:
    """
    Orchestrates asynchronous build log generation.

    Usage:
        service = BuildLogService(catalog, registry, pool, files)
        task_id = service.initiate("Castle")
        service.get_status(task_id).status   # TaskState.PENDING ... COMPLETED
        result = service.get_file(task_id)
    """

    def __init__(
        self,
        catalog: BuildLookup,
        registry: TaskStatusRegistry,
        pool: LogWorkerPool,
        files: LogFileStore,
        artificial_delay: float = 0.0,
        metrics: Optional[SimpleMetrics] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._catalog = catalog
        self._registry = registry
        self._pool = pool
        self._files = files
        self._artificial_delay = artificial_delay
        self._metrics = metrics
        self._clock = clock

    def initiate(self, identifier: Union[Identifier, str, int]) -> str:
        """
        Start generating a log for a build and return its task handle.

        Raises:
            NotFoundError: no build matches ``identifier`` (nothing is recorded)
            SubmissionRejectedError: the worker pool is saturated; the task
                record exists and is FAILED
        """
        build = resolve_build(self._catalog, identifier)
        task_id = str(uuid.uuid4())
        self._registry.create(task_id, build_name=build.name)
        logger.info(f"Initiating log generation for build {build.id} ({build.name}), task {task_id}")

        try:
            self._pool.submit(self._generate, build.id, task_id)
        except SubmissionRejectedError as exc:
            message = f"Submission rejected: {exc}"
            self._registry.fail(task_id, message)
            self._count("tasks_failed")
            logger.warning(f"Task {task_id}: {message}")
            raise SubmissionRejectedError(message, task_id=task_id) from exc
        return task_id

    def _generate(self, build_id: int, task_id: str) -> None:
        """Worker job body. Never raises: every failure ends as FAILED."""
        logger.info(f"Task {task_id}: starting log generation for build {build_id}")
        try:
            if self._artificial_delay > 0:
                time.sleep(self._artificial_delay)

            build = self._catalog.find_by_id(build_id)
            if build is None:
                logger.error(f"Task {task_id}: build {build_id} disappeared before generation")
                self._registry.fail(task_id, BUILD_VANISHED_MESSAGE)
                self._count("tasks_failed")
                return

            content = build_log_content(build, self._clock())
            path = self._files.write(build, task_id, content)
            self._registry.complete(task_id, str(path))
            self._count("tasks_completed")
        except Exception as exc:
            logger.exception(f"Task {task_id}: log generation failed")
            self._registry.fail(task_id, f"{type(exc).__name__}: {exc}")
            self._count("tasks_failed")

    def get_status(self, task_id: str) -> TaskStatus:
        """
        Current status of a task.

        Raises:
            InvalidInputError: ``task_id`` is not a UUID
            NotFoundError: no record (never created, or evicted from the cache)
        """
        task_id = normalize_task_id(task_id)
        status = self._registry.get(task_id)
        if status is None:
            raise NotFoundError(f"Log generation task '{task_id}' not found")
        return status

    def get_file(self, task_id: str) -> LogFileResult:
        """
        Resolve the downloadable file of a task.

        Raises:
            InvalidInputError: ``task_id`` is not a UUID
            NotFoundError: unknown task, FAILED task, or the file of a
                COMPLETED task is gone from disk
        """
        status = self.get_status(task_id)
        task_id = status.task_id

        if status.status is TaskState.PENDING:
            return LogFileResult(task_id=task_id, in_progress=True)

        if status.status is TaskState.FAILED:
            detail = f": {status.error_message}" if status.error_message else ""
            raise NotFoundError(f"Log generation failed{detail}")

        path = Path(status.file_path or "")
        if not status.file_path or not path.is_file() or not self._files.is_valid_path(path):
            logger.error(f"Task {task_id}: COMPLETED but log file is missing: {path}")
            raise NotFoundError(f"Log file for task '{task_id}' not found on server")

        return LogFileResult(
            task_id=task_id,
            in_progress=False,
            path=path,
            filename=download_filename(status.build_name, task_id),
        )

    def wait_for(self, task_id: str, timeout: float = 30.0, poll_interval: float = 0.05) -> TaskStatus:
        """
        Poll until the task reaches a terminal state or ``timeout`` elapses.

        Returns the last observed status, which is still PENDING on timeout.
        """
        deadline = time.monotonic() + timeout
        status = self.get_status(task_id)
        while not status.is_terminal and time.monotonic() < deadline:
            time.sleep(poll_interval)
            status = self.get_status(task_id)
        return status

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(name)
