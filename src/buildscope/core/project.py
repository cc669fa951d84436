"""Project definitions: nodes in the build hierarchy."""

import logging
import os
import weakref
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ..exceptions import BaseDirAlreadySetError, TaskNotFoundError
from ..models.project_models import ProjectState, ProjectSummary
from ..tasks.task import Action, FileTask, MultiTask, TaskHandle
from .attributes import AttributeRegistry, InheritedAttribute

if TYPE_CHECKING:
    from .registry import ProjectRegistry


logger = logging.getLogger(__name__)

ProjectBody = Callable[["ProjectNode"], Any]


class ProjectNode:
    """
    A project or sub-project.

    Tasks created by the project are prefixed with the project name, e.g.
    project "foo" creates "foo:compile" and its sub-project "bar" creates
    "foo:bar:compile". The definition body runs once, when the registry
    evaluates the project; anything handed out by the registry has already
    been evaluated.
    """

    version = InheritedAttribute("version")
    group = InheritedAttribute("group")

    def __init__(
        self,
        name: str,
        registry: "ProjectRegistry",
        parent: Optional["ProjectNode"] = None,
    ):
        self.name = name
        self.registry = registry
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self.attribute_slots: Dict[str, Any] = {}
        self.state = ProjectState.PENDING
        self.actions: List[ProjectBody] = []
        self.subprojects: List["ProjectNode"] = []
        self._base_dir: Optional[Path] = None

    @property
    def parent(self) -> Optional["ProjectNode"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def scope(self) -> List[str]:
        return self.name.split(":")

    @property
    def prerequisites(self) -> List["ProjectNode"]:
        return list(self.subprojects)

    # Base directory

    @property
    def base_dir(self) -> Path:
        """
        The project's base directory.

        The top-level project defaults to the configured working directory;
        a sub-project defaults to a directory of the same name under its
        parent's base directory. Reading the value fixes it.
        """
        if self._base_dir is None:
            parent = self.parent
            if parent is not None:
                self._base_dir = parent.base_dir / self.scope[-1]
            else:
                self._base_dir = _normalize(self.registry.config.working_dir)
        return self._base_dir

    def _peek_base_dir(self) -> Path:
        if self._base_dir is not None:
            return self._base_dir
        parent = self.parent
        if parent is not None:
            return parent._peek_base_dir() / self.scope[-1]
        return _normalize(self.registry.config.working_dir)

    @base_dir.setter
    def base_dir(self, directory) -> None:
        if self._base_dir is not None:
            raise BaseDirAlreadySetError(self.name)
        self._base_dir = _normalize(
            Path(self.registry.config.working_dir) / Path(directory).expanduser()
        )

    def path_to(self, *names) -> Path:
        """
        Returns a path relative to the base directory.

        path_to("src", "main") => <base_dir>/src/main
        path_to("/tmp") => /tmp
        """
        return _normalize(self.base_dir.joinpath(*[str(name) for name in names]))

    # Attributes by name

    def __getitem__(self, name: str) -> Any:
        return self.registry.attributes.read(self, name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.registry.attributes.write(self, name, value)

    # Definition

    def enhance(self, action: ProjectBody) -> "ProjectNode":
        """Append an action to run, in order, when the project is evaluated."""
        if not callable(action):
            raise TypeError(
                f"Project action must be callable (type={type(action).__name__})"
            )
        self.actions.append(action)
        return self

    def add_subproject(self, child: "ProjectNode") -> None:
        self.subprojects.append(child)
        self.enhance(lambda project: project.registry.evaluate(child))

    def define(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        body: Optional[ProjectBody] = None,
    ) -> "ProjectNode":
        """Define a sub-project of this project."""
        return self.registry.define(f"{self.name}:{name}", attributes, body)

    def project(self, name: Optional[str] = None) -> "ProjectNode":
        """Find a project relative to this one; returns self without a name."""
        if name is None:
            return self
        return self.registry.resolve(name, scope=self.name)

    def projects(self, *names: str) -> List["ProjectNode"]:
        """
        Sub-projects of this project, or the named projects relative to it.

        Names may also be passed as lists, e.g. projects(["b", "c"]).
        """
        return self.registry.resolve_many(list(names) or None, scope=self.name)

    def invoke(self) -> "ProjectNode":
        return self.registry.evaluate(self)

    # Tasks

    def task(self, name: str, prerequisites=None, action: Optional[Action] = None) -> TaskHandle:
        """
        Create or enhance a task in this project.

        Inside the project definition the task is created if missing. From
        anywhere else the task must already exist, and is only enhanced.
        A leading ":" defines the task in the top-level namespace instead.
        """
        return self._project_task(name, prerequisites, action, TaskHandle)

    def file(self, path, prerequisites=None, action: Optional[Action] = None) -> TaskHandle:
        """Create or enhance a file task; the path is relative to base_dir."""
        return self._project_task(str(self.path_to(path)), prerequisites, action, FileTask)

    def recursive_task(self, name: str, prerequisites=None, action: Optional[Action] = None) -> TaskHandle:
        """
        Create a task that also runs the same task in all sub-projects.

        The parent's task of the same name is enhanced to depend on this one.
        """
        task_class = MultiTask if self.registry.config.parallel else TaskHandle
        task = self._project_task(name, None, None, task_class)
        parent = self.parent
        if parent is not None:
            parent.task(name, [task])
        return task.enhance(prerequisites, action)

    def tasks(self) -> List[TaskHandle]:
        return [
            task for task in self.registry.tasks.tasks()
            if task.owning_project_name == self.name
        ]

    def _project_task(self, name, prerequisites, action, task_class) -> TaskHandle:
        manager = self.registry.tasks
        if name.startswith(":"):
            return manager.define_task(
                name[1:], prerequisites, action, task_class=task_class, scope=[]
            )
        if manager.current_scope == self.scope:
            return manager.define_task(name, prerequisites, action, task_class=task_class)

        task = manager.lookup(name, self.scope)
        if task is None:
            full_name = task_class.scope_name(self.scope, name)
            raise TaskNotFoundError(
                full_name,
                "You cannot define a project task outside the project definition, "
                f"and no task {full_name} defined in the project",
            )
        return task.enhance(prerequisites, action)

    def summary(self) -> ProjectSummary:
        parent = self.parent
        return ProjectSummary(
            name=self.name,
            parent=parent.name if parent is not None else None,
            base_dir=str(self._peek_base_dir()),
            state=self.state,
            attributes=dict(self.attribute_slots),
            tasks=[task.summary() for task in self.tasks()],
        )

    def __repr__(self) -> str:
        return f"project({self.name!r})"


def _normalize(path) -> Path:
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


def default_attribute_registry() -> AttributeRegistry:
    """Attribute registry holding the built-in project attributes."""
    attributes = AttributeRegistry()
    attributes.register(ProjectNode.version)
    attributes.register(ProjectNode.group)
    attributes.declare_property(
        "base_dir",
        lambda node: node.base_dir,
        ProjectNode.base_dir.fset,
    )
    return attributes
