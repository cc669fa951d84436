"""Task namespace and active scope."""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence, Type

from ..exceptions import TaskNotFoundError
from .scheduler import SequentialScheduler
from .task import Action, TaskHandle

logger = logging.getLogger(__name__)


class TaskManager:
    """
    Owns every task by fully-qualified name, plus the active scope.

    Names are scoped by joining the active scope with ":". A leading ":"
    marks a name as absolute.
    """

    def __init__(self, scheduler=None):
        self._tasks: Dict[str, TaskHandle] = {}
        self._scope: List[str] = []
        self.scheduler = scheduler or SequentialScheduler()

    @property
    def current_scope(self) -> List[str]:
        return list(self._scope)

    @contextmanager
    def in_namespace(self, scope: Sequence[str]) -> Iterator[List[str]]:
        """Make `scope` the active scope for the duration of the block."""
        previous = self._scope
        self._scope = list(scope)
        try:
            yield self.current_scope
        finally:
            self._scope = previous

    def define_task(
        self,
        name: str,
        prerequisites=None,
        action: Optional[Action] = None,
        task_class: Type[TaskHandle] = TaskHandle,
        scope: Optional[Sequence[str]] = None,
    ) -> TaskHandle:
        """
        Create a task in the given (or active) scope, or enhance an existing one.

        Args:
            name: Task name relative to the scope
            prerequisites: Prerequisite names or invokables
            action: Callable receiving the task
            task_class: Class used when the task does not exist yet
            scope: Scope to define in (active scope if None)

        Returns:
            The created or enhanced task
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Task name must be a non-empty string")
        scope = self.current_scope if scope is None else list(scope)
        full_name = task_class.scope_name(scope, name.strip())

        task = self._tasks.get(full_name)
        if task is None:
            task = task_class(full_name, self, scope=scope)
            self._tasks[full_name] = task
            logger.debug(f"Defined {task_class.__name__} {full_name}")
        return task.enhance(prerequisites, action)

    def lookup(self, name: str, scope: Optional[Sequence[str]] = None) -> Optional[TaskHandle]:
        """
        Find a task by name, trying the innermost scope first.

        Args:
            name: Task name, relative or absolute (leading ":")
            scope: Scope to search from (active scope if None)

        Returns:
            The task, or None if not defined anywhere on the scope path
        """
        if name.startswith(":"):
            return self._tasks.get(name[1:])
        scope = self.current_scope if scope is None else list(scope)
        for depth in range(len(scope), -1, -1):
            task = self._tasks.get(":".join(scope[:depth] + [name]))
            if task is not None:
                return task
        return None

    def tasks(self) -> List[TaskHandle]:
        return [self._tasks[name] for name in sorted(self._tasks)]

    def clear(self) -> None:
        self._tasks.clear()
        self._scope = []

    def __getitem__(self, name: str) -> TaskHandle:
        task = self.lookup(name)
        if task is None:
            raise TaskNotFoundError(name)
        return task

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._tasks)
