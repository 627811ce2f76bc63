"""
Build Log Web API — FastAPI transport for the log generation pipeline.

Usage:
    from buildlog.web import create_app

    app = create_app(config_path="buildlog.yaml")
    # Run with: python -m buildlog.web
"""

from .protocol import task_status_to_dict
from .server import create_app

__all__ = [
    "create_app",
    "task_status_to_dict",
]
