"""
Composition root.

Builds exactly one CacheStore and hands the same instance to the catalog
and the task registry. Nothing in the package reaches for a global cache.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .cache import CacheStore
from .catalog import InMemoryBuildCatalog
from .config import BuildLogConfig
from .registry import TaskStatusRegistry
from .service import BuildLogService
from .storage import LogFileStore
from .types import Build
from .utils.metrics import SimpleMetrics
from .worker import LogWorkerPool

logger = logging.getLogger(__name__)


@dataclass
class BuildLogServices:
    """Everything one process needs, wired together."""
    config: BuildLogConfig
    metrics: SimpleMetrics
    cache: CacheStore
    catalog: InMemoryBuildCatalog
    registry: TaskStatusRegistry
    pool: LogWorkerPool
    files: LogFileStore
    service: BuildLogService

    def start(self) -> None:
        self.pool.start()

    def shutdown(self, wait: bool = True) -> None:
        self.pool.shutdown(wait=wait)

    def __enter__(self) -> "BuildLogServices":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def create_services(
    config: Optional[BuildLogConfig] = None,
    builds: Optional[Iterable[Build]] = None,
) -> BuildLogServices:
    """
    Wire the cache, catalog, registry, worker pool and orchestrator.

    The worker pool is created but not started; call ``start()`` (or use
    the result as a context manager) before initiating tasks.
    """
    config = config or BuildLogConfig()
    metrics = SimpleMetrics()
    cache = CacheStore(max_size=config.cache_max_size, metrics=metrics)

    catalog = InMemoryBuildCatalog(cache)
    seed = config.get_seed_file()
    if seed is not None:
        catalog.load_seed(seed)
    for build in builds or []:
        catalog.add(build)

    registry = TaskStatusRegistry(cache)
    pool = LogWorkerPool(
        core_workers=config.core_workers,
        max_workers=config.max_workers,
        queue_capacity=config.queue_capacity,
        thread_name_prefix=config.thread_name_prefix,
        submit_timeout=config.submit_timeout,
        metrics=metrics,
    )
    files = LogFileStore(config.get_log_dir())
    service = BuildLogService(
        catalog=catalog,
        registry=registry,
        pool=pool,
        files=files,
        artificial_delay=config.artificial_delay,
        metrics=metrics,
    )
    logger.debug(f"Created build log services (cache max_size={config.cache_max_size})")
    return BuildLogServices(
        config=config,
        metrics=metrics,
        cache=cache,
        catalog=catalog,
        registry=registry,
        pool=pool,
        files=files,
        service=service,
    )
