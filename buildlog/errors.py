"""
Build Log exception hierarchy.

The web layer maps these onto HTTP status codes; service code raises them
synchronously to the caller and never inside worker jobs.
"""

from typing import Optional


class BuildLogError(Exception):
    """Base class for all Build Log errors."""


class NotFoundError(BuildLogError):
    """A build, task record or log file does not exist (or no longer does)."""


class InvalidInputError(BuildLogError, ValueError):
    """Malformed client input, e.g. a task handle that is not a UUID."""


class SubmissionRejectedError(BuildLogError):
    """The worker pool had no free slot for a new job.

    When raised by the orchestrator the task record already exists and is
    FAILED, so ``task_id`` can still be polled.
    """

    def __init__(self, message: str, task_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.task_id = task_id
