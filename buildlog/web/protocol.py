"""
JSON shapes returned by the REST API.

Field names are camelCase to match the existing frontend; optional task
fields are omitted rather than sent as null.
"""

from typing import Any, Dict, Optional

from ..types import TaskStatus

LOG_IN_PROGRESS_MESSAGE = "Log generation is still in progress"


def task_status_to_dict(status: TaskStatus) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "taskId": status.task_id,
        "status": status.status.value,
    }
    if status.file_path is not None:
        data["filePath"] = status.file_path
    if status.error_message is not None:
        data["errorMessage"] = status.error_message
    return data


def problem_to_dict(status_code: int, title: str, detail: str, **extra: Optional[str]) -> Dict[str, Any]:
    """Problem-detail style error body."""
    data: Dict[str, Any] = {"title": title, "status": status_code, "detail": detail}
    data.update({k: v for k, v in extra.items() if v is not None})
    return data
