"""Core application services and configuration."""

from .settings import Settings, get_settings
from .tasks import ExecutionTasksRepository

__all__ = (
    "Settings",
    "get_settings",
    "ExecutionTasksRepository",
)
