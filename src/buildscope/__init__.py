"""
buildscope: project definitions and task namespaces for a build tool.

Projects form a tree of dotted names ("app", "app:web"). Each project owns
namespaced tasks and inherited attributes, and its definition body is
evaluated lazily, in the order lookups require.
"""

from .config import BuildConfig
from .core import (
    INITIALIZE_TASK,
    AttributeRegistry,
    InheritedAttribute,
    ProjectNode,
    ProjectRegistry,
)
from .exceptions import (
    BaseDirAlreadySetError,
    BuildDefinitionError,
    CircularDependencyError,
    CircularEvaluationError,
    DuplicateProjectError,
    InvalidNestingError,
    ParentMissingError,
    ProjectNotFoundError,
    TaskNotFoundError,
    UnknownAttributeError,
)
from .models import ProjectState, ProjectSummary, TaskSummary
from .tasks import (
    FileTask,
    Invokable,
    MultiTask,
    ParallelScheduler,
    SequentialScheduler,
    TaskHandle,
    TaskManager,
)

__version__ = "0.1.0"

__all__ = [
    "INITIALIZE_TASK",
    "AttributeRegistry",
    "BaseDirAlreadySetError",
    "BuildConfig",
    "BuildDefinitionError",
    "CircularDependencyError",
    "CircularEvaluationError",
    "DuplicateProjectError",
    "FileTask",
    "InheritedAttribute",
    "InvalidNestingError",
    "Invokable",
    "MultiTask",
    "ParallelScheduler",
    "ParentMissingError",
    "ProjectNode",
    "ProjectNotFoundError",
    "ProjectRegistry",
    "ProjectState",
    "ProjectSummary",
    "SequentialScheduler",
    "TaskHandle",
    "TaskManager",
    "TaskNotFoundError",
    "TaskSummary",
    "UnknownAttributeError",
]
