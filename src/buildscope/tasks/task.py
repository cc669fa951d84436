"""Task handles: named units of work with prerequisites and actions."""

import logging
import threading
from contextvars import ContextVar
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Iterable,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from ..exceptions import CircularDependencyError, TaskNotFoundError
from ..models.project_models import TaskSummary

if TYPE_CHECKING:
    from .manager import TaskManager


logger = logging.getLogger(__name__)


@runtime_checkable
class Invokable(Protocol):
    """Anything the scheduler can invoke: tasks and projects alike."""

    name: str

    def invoke(self) -> Any:
        ...


Prerequisite = Union[str, Invokable]
Action = Callable[["TaskHandle"], Any]

# Tasks being invoked by the current thread, outermost first. Copied into
# worker threads by asyncio.to_thread.
_invocation_chain: ContextVar[Tuple["TaskHandle", ...]] = ContextVar(
    "buildscope_invocation_chain", default=()
)


def _as_list(prerequisites: Optional[Union[Prerequisite, Iterable[Prerequisite]]]) -> List[Prerequisite]:
    if prerequisites is None:
        return []
    if isinstance(prerequisites, (str, Path)) or isinstance(prerequisites, Invokable):
        prerequisites = [prerequisites]
    return [str(p) if isinstance(p, Path) else p for p in prerequisites]


class TaskHandle:
    """
    A task in the build namespace.

    Invocation is idempotent: prerequisites are invoked first, each once,
    then the actions run in the order they were added. The lock is held for
    the whole invocation so concurrent callers wait for completion.
    """

    def __init__(
        self,
        name: str,
        manager: "TaskManager",
        scope: Optional[Sequence[str]] = None,
    ):
        self.name = name
        self.manager = manager
        self.scope: List[str] = list(scope or [])
        self.prerequisites: List[Prerequisite] = []
        self.actions: List[Action] = []
        self.invoked = False
        self._lock = threading.RLock()

    @classmethod
    def scope_name(cls, scope: Sequence[str], name: str) -> str:
        return ":".join(list(scope) + [name])

    @property
    def owning_project_name(self) -> Optional[str]:
        return ":".join(self.scope) or None

    def enhance(
        self,
        prerequisites: Optional[Union[Prerequisite, Iterable[Prerequisite]]] = None,
        action: Optional[Action] = None,
    ) -> "TaskHandle":
        """Add prerequisites and an action to this task."""
        for prerequisite in _as_list(prerequisites):
            if prerequisite is self:
                raise ValueError(f"Task {self.name} cannot depend on itself")
            if prerequisite not in self.prerequisites:
                self.prerequisites.append(prerequisite)
        if action is not None:
            if not callable(action):
                raise TypeError(
                    f"Task action must be callable (type={type(action).__name__})"
                )
            self.actions.append(action)
        return self

    def prerequisite_tasks(self) -> List[Invokable]:
        """Resolve prerequisite names against this task's scope."""
        resolved: List[Invokable] = []
        for prerequisite in self.prerequisites:
            if not isinstance(prerequisite, str):
                resolved.append(prerequisite)
                continue
            task = self.manager.lookup(prerequisite, self.scope)
            if task is None and Path(prerequisite).exists():
                task = self.manager.define_task(
                    prerequisite, task_class=FileTask, scope=[]
                )
            if task is None:
                raise TaskNotFoundError(
                    prerequisite,
                    f"Don't know how to build {prerequisite} (prerequisite of {self.name})",
                )
            resolved.append(task)
        return resolved

    def invoke(self) -> "TaskHandle":
        """
        Invoke prerequisites, then run the actions if needed, once.

        Raises:
            CircularDependencyError: The task is already on the invocation chain
        """
        chain = _invocation_chain.get()
        if self in chain:
            raise CircularDependencyError(
                self.name, [task.name for task in chain] + [self.name]
            )

        token = _invocation_chain.set(chain + (self,))
        try:
            with self._lock:
                if self.invoked:
                    return self
                self.invoked = True
                logger.debug(f"Invoking task {self.name}")
                self.invoke_prerequisites()
                if self.needed():
                    self.execute()
                else:
                    logger.debug(f"Task {self.name} is up to date")
        finally:
            _invocation_chain.reset(token)
        return self

    def invoke_prerequisites(self) -> None:
        for task in self.prerequisite_tasks():
            task.invoke()

    def needed(self) -> bool:
        return True

    def timestamp(self) -> Optional[float]:
        return None

    def execute(self) -> None:
        logger.info(f"Executing task {self.name} ({len(self.actions)} actions)")
        for action in self.actions:
            action(self)

    def summary(self) -> TaskSummary:
        return TaskSummary(
            name=self.name,
            kind=type(self).__name__,
            project=self.owning_project_name,
            prerequisites=[
                p if isinstance(p, str) else p.name for p in self.prerequisites
            ],
            action_count=len(self.actions),
            invoked=self.invoked,
        )

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FileTask(TaskHandle):
    """
    A task whose identity is a filesystem path.

    Needed when the file does not exist, or when any prerequisite carrying a
    timestamp is newer than the file.
    """

    @classmethod
    def scope_name(cls, scope: Sequence[str], name: str) -> str:
        return name

    @property
    def path(self) -> Path:
        return Path(self.name)

    def timestamp(self) -> Optional[float]:
        if self.path.exists():
            return self.path.stat().st_mtime
        return None

    def needed(self) -> bool:
        own = self.timestamp()
        if own is None:
            return True
        for task in self.prerequisite_tasks():
            stamp = getattr(task, "timestamp", None)
            other = stamp() if callable(stamp) else None
            if other is not None and other > own:
                return True
        return False


class MultiTask(TaskHandle):
    """A task whose prerequisites are fanned out through the scheduler."""

    def invoke_prerequisites(self) -> None:
        self.manager.scheduler.invoke_all(self.prerequisite_tasks())
