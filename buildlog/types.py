"""
Build Log type definitions.

This module contains the public value types shared by the cache, the task
registry, the worker jobs and the web layer.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class TaskState(Enum):
    """Lifecycle state of a log generation task."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskState.PENDING


@dataclass(frozen=True)
class TaskStatus:
    """Status record of one log generation request.

    Records are immutable: a transition replaces the record in the cache
    rather than mutating it. ``file_path`` is set only for COMPLETED,
    ``error_message`` only for FAILED.
    """
    task_id: str
    status: TaskState
    file_path: Optional[str] = None
    error_message: Optional[str] = None
    build_name: Optional[str] = None

    @classmethod
    def pending(cls, task_id: str, build_name: Optional[str] = None) -> "TaskStatus":
        return cls(task_id=task_id, status=TaskState.PENDING, build_name=build_name)

    @classmethod
    def completed(
        cls, task_id: str, file_path: str, build_name: Optional[str] = None
    ) -> "TaskStatus":
        return cls(
            task_id=task_id,
            status=TaskState.COMPLETED,
            file_path=file_path,
            build_name=build_name,
        )

    @classmethod
    def failed(
        cls, task_id: str, error_message: str, build_name: Optional[str] = None
    ) -> "TaskStatus":
        return cls(
            task_id=task_id,
            status=TaskState.FAILED,
            error_message=error_message,
            build_name=build_name,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class NamedRef:
    """A related named entity (author, theme, color)."""
    id: int
    name: str


@dataclass
class Build:
    """A build with all the fields shown in its log."""
    id: int
    name: str
    authors: list[NamedRef] = field(default_factory=list)
    themes: list[NamedRef] = field(default_factory=list)
    colors: list[NamedRef] = field(default_factory=list)
    description: Optional[str] = None
    screenshots: list[str] = field(default_factory=list)
    schem_file: Optional[bytes] = None


# === Identifiers ===

@dataclass(frozen=True)
class ById:
    """Build referenced by its numeric ID."""
    build_id: int
    raw: str = ""


@dataclass(frozen=True)
class ByName:
    """Build referenced by its exact name."""
    name: str


Identifier = Union[ById, ByName]

_NUMERIC_RE = re.compile(r"^[+-]?\d+$")


def parse_identifier(raw: Union[str, int, ById, ByName]) -> Identifier:
    """Parse a path identifier once into ``ById`` or ``ByName``.

    Purely numeric strings become ``ById`` (the raw text is kept so a build
    literally named "42" can still be found by name); everything else is a
    name. Text is not stripped: " 42" is the name " 42".
    """
    if isinstance(raw, (ById, ByName)):
        return raw
    if isinstance(raw, int):
        return ById(build_id=raw, raw=str(raw))
    if _NUMERIC_RE.match(raw):
        return ById(build_id=int(raw), raw=raw)
    return ByName(name=raw)
