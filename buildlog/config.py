"""
Build Log configuration handling.

Provides YAML configuration loading and validation.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",   # Vite default
    "http://127.0.0.1:5173",
]


@dataclass
class BuildLogConfig:
    """
    Build Log service configuration.

    Can be loaded from a YAML file or created programmatically.
    """
    # Cache
    cache_max_size: int = 1000

    # Worker pool
    core_workers: int = 5
    max_workers: int = 10
    queue_capacity: int = 25
    thread_name_prefix: str = "BuildLogGen-"
    submit_timeout: float = 0.5  # seconds to wait for a free slot

    # Generated logs
    log_dir: str = "build_logs"
    artificial_delay: float = 0.0  # seconds, simulates slow generation

    # Build catalog
    seed_file: str = ""

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = DEFAULT_LOG_FORMAT
    log_max_bytes: int = 10485760  # 10MB
    log_backup_count: int = 3

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    def __post_init__(self) -> None:
        if self.cache_max_size <= 0:
            raise ValueError("cache max_size must be greater than 0")
        if self.core_workers <= 0:
            raise ValueError("core_workers must be greater than 0")
        if self.max_workers < self.core_workers:
            raise ValueError("max_workers must be >= core_workers")
        if self.queue_capacity < 0:
            raise ValueError("queue_capacity must not be negative")
        if self.submit_timeout < 0:
            raise ValueError("submit_timeout must not be negative")

    @classmethod
    def load(cls, path: str) -> "BuildLogConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            BuildLogConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If config file is invalid YAML
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildLogConfig":
        """
        Create configuration from a dictionary.

        Unknown keys are ignored; missing sections fall back to defaults.
        """
        cache_cfg = data.get("cache", {})
        executor_cfg = data.get("executor", {})
        logs_cfg = data.get("logs", {})
        catalog_cfg = data.get("catalog", {})
        logging_cfg = data.get("logging", {})
        server_cfg = data.get("server", {})

        return cls(
            cache_max_size=cache_cfg.get("max_size", 1000),
            core_workers=executor_cfg.get("core_workers", 5),
            max_workers=executor_cfg.get("max_workers", 10),
            queue_capacity=executor_cfg.get("queue_capacity", 25),
            thread_name_prefix=executor_cfg.get("thread_name_prefix", "BuildLogGen-"),
            submit_timeout=executor_cfg.get("submit_timeout", 0.5),
            log_dir=logs_cfg.get("directory", "build_logs"),
            artificial_delay=logs_cfg.get("artificial_delay", 0.0),
            seed_file=catalog_cfg.get("seed_file", ""),
            log_level=logging_cfg.get("level", "INFO"),
            log_file=logging_cfg.get("file", ""),
            log_format=logging_cfg.get("format", DEFAULT_LOG_FORMAT),
            log_max_bytes=logging_cfg.get("max_bytes", 10485760),
            log_backup_count=logging_cfg.get("backup_count", 3),
            host=server_cfg.get("host", "0.0.0.0"),
            port=server_cfg.get("port", 8080),
            cors_origins=server_cfg.get("cors_origins", list(DEFAULT_CORS_ORIGINS)),
        )

    def get_log_dir(self) -> Path:
        """
        Get the resolved directory for generated build logs.

        The BUILDLOG_LOG_DIR environment variable wins over the config value.
        """
        env_dir = os.environ.get("BUILDLOG_LOG_DIR")
        return Path(env_dir or self.log_dir).expanduser().resolve()

    def get_seed_file(self) -> Optional[Path]:
        if not self.seed_file:
            return None
        return Path(self.seed_file).expanduser()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Configuration as dictionary, in the same shape from_dict() reads
        """
        return {
            "cache": {
                "max_size": self.cache_max_size,
            },
            "executor": {
                "core_workers": self.core_workers,
                "max_workers": self.max_workers,
                "queue_capacity": self.queue_capacity,
                "thread_name_prefix": self.thread_name_prefix,
                "submit_timeout": self.submit_timeout,
            },
            "logs": {
                "directory": self.log_dir,
                "artificial_delay": self.artificial_delay,
            },
            "catalog": {
                "seed_file": self.seed_file,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
                "format": self.log_format,
                "max_bytes": self.log_max_bytes,
                "backup_count": self.log_backup_count,
            },
            "server": {
                "host": self.host,
                "port": self.port,
                "cors_origins": list(self.cors_origins),
            },
        }

    def save(self, path: str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to save the configuration file
        """
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)
