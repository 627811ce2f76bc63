"""
Build Log — asynchronous text log generation for builds.

A client asks for a build's log, gets a task handle back immediately and
polls until a background worker has written the file.

Basic Usage:
    from buildlog import create_services

    with create_services() as services:
        task_id = services.service.initiate("Castle")
        status = services.service.wait_for(task_id)
        print(status.status, status.file_path)

Web Usage:
    python -m buildlog.web --seed builds.yaml --port 8080
"""

__version__ = "1.0.0"

from .app import BuildLogServices, create_services
from .cache import (
    CacheStore,
    TypedCacheView,
    generate_get_all_key,
    generate_key,
    generate_query_key,
)
from .catalog import BuildLookup, InMemoryBuildCatalog, resolve_build
from .config import BuildLogConfig
from .content import build_log_content
from .errors import BuildLogError, InvalidInputError, NotFoundError, SubmissionRejectedError
from .registry import TaskStatusRegistry
from .service import BuildLogService, LogFileResult
from .types import Build, ById, ByName, Identifier, NamedRef, TaskState, TaskStatus, parse_identifier
from .worker import LogWorkerPool

__all__ = [
    "__version__",
    # Composition
    "BuildLogServices",
    "create_services",
    "BuildLogConfig",
    # Cache
    "CacheStore",
    "TypedCacheView",
    "generate_key",
    "generate_get_all_key",
    "generate_query_key",
    # Pipeline
    "TaskStatusRegistry",
    "LogWorkerPool",
    "BuildLogService",
    "LogFileResult",
    "build_log_content",
    # Catalog
    "BuildLookup",
    "InMemoryBuildCatalog",
    "resolve_build",
    # Types
    "Build",
    "NamedRef",
    "TaskState",
    "TaskStatus",
    "Identifier",
    "ById",
    "ByName",
    "parse_identifier",
    # Errors
    "BuildLogError",
    "NotFoundError",
    "InvalidInputError",
    "SubmissionRejectedError",
]
