"""
On-disk storage for generated build logs.

Files are written to one configured directory (default: ./build_logs,
overridable via BUILDLOG_LOG_DIR). Names combine the build and the task
handle so concurrent jobs for the same build never collide.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from .types import Build

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r'[^\w\-. ]')


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """Sanitize a build name for use inside a file name."""
    name = name.replace("\x00", "").replace("/", "_").replace("\\", "_")
    name = _UNSAFE_FILENAME_RE.sub("_", name)
    name = name.replace(" ", "_")
    name = re.sub(r'_+', '_', name).strip("_. ")
    return name[:max_length] if name else "unnamed"


def download_filename(build_name: Optional[str], task_id: str) -> str:
    """Attachment name offered to clients, e.g. ``Castle_<task>.log``."""
    return f"{sanitize_filename(build_name or 'build')}_{task_id}.log"


class LogFileStore:
    """Manages generated log files on disk."""

    def __init__(self, base_dir: Path) -> None:
        self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        logger.info(f"Build log directory: {self._base.resolve()}")

    @property
    def base_dir(self) -> Path:
        return self._base

    def path_for(self, build: Build, task_id: str) -> Path:
        return self._base / f"build_{build.id}_{sanitize_filename(build.name)}_{task_id}.log"

    def write(self, build: Build, task_id: str, content: str) -> Path:
        """Write log content and return the file path."""
        path = self.path_for(build, task_id)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote build log {path.name} ({len(content)} chars)")
        return path

    def is_valid_path(self, path: Path) -> bool:
        """Check that a path is inside the log directory (prevent traversal)."""
        try:
            path.resolve().relative_to(self._base.resolve())
            return True
        except ValueError:
            return False
