"""
Task status registry.

Not a separate data structure: task records live in the shared CacheStore
under ``BuildLogTask::<task_id>``. They therefore share the store's
clear-on-overflow policy, and an evicted handle looks exactly like one that
never existed.
"""

import logging
import threading
from typing import Optional

from .cache import CacheStore, TypedCacheView
from .types import TaskStatus

logger = logging.getLogger(__name__)

TASK_NAMESPACE = "BuildLogTask"


class TaskStatusRegistry:
    """Reads and writes TaskStatus records for log generation tasks."""

    def __init__(self, cache: CacheStore) -> None:
        self._view: TypedCacheView[TaskStatus] = TypedCacheView(cache, TaskStatus, TASK_NAMESPACE)
        # Serializes the read-check-write of terminal transitions.
        self._transition_lock = threading.Lock()

    def key_for(self, task_id: str) -> str:
        return self._view.key_for(task_id)

    def create(self, task_id: str, build_name: Optional[str] = None) -> TaskStatus:
        status = TaskStatus.pending(task_id, build_name=build_name)
        self._view.put(task_id, status)
        logger.info(f"Task {task_id}: PENDING")
        return status

    def get(self, task_id: str) -> Optional[TaskStatus]:
        return self._view.get(task_id)

    def complete(self, task_id: str, file_path: str) -> TaskStatus:
        return self._finish(task_id, lambda name: TaskStatus.completed(task_id, file_path, name))

    def fail(self, task_id: str, error_message: str) -> TaskStatus:
        return self._finish(task_id, lambda name: TaskStatus.failed(task_id, error_message, name))

    def _finish(self, task_id: str, make_status) -> TaskStatus:
        """Write a terminal record unless one is already stored."""
        with self._transition_lock:
            current = self._view.get(task_id)
            if current is not None and current.is_terminal:
                logger.warning(
                    f"Task {task_id}: already {current.status.value}, ignoring further transition"
                )
                return current
            status = make_status(current.build_name if current else None)
            # An evicted PENDING record is written back so the outcome stays visible.
            self._view.put(task_id, status)
        logger.info(f"Task {task_id}: {status.status.value}")
        return status
