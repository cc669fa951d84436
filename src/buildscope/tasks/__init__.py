"""Task namespace, task handles and schedulers."""

from .manager import TaskManager
from .scheduler import ParallelScheduler, SequentialScheduler, scheduler_for
from .task import FileTask, Invokable, MultiTask, TaskHandle

__all__ = [
    "FileTask",
    "Invokable",
    "MultiTask",
    "ParallelScheduler",
    "SequentialScheduler",
    "TaskHandle",
    "TaskManager",
    "scheduler_for",
]
