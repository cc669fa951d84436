"""Project registry: definition, lazy evaluation and name resolution."""

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from ..config.build_config import BuildConfig
from ..exceptions import (
    CircularEvaluationError,
    DuplicateProjectError,
    InvalidNestingError,
    ParentMissingError,
    ProjectNotFoundError,
)
from ..models.project_models import ProjectState, ProjectSummary
from ..tasks.manager import TaskManager
from ..tasks.scheduler import scheduler_for
from ..tasks.task import TaskHandle
from .attributes import AttributeRegistry, InheritedAttribute
from .project import ProjectBody, ProjectNode, _normalize, default_attribute_registry

logger = logging.getLogger(__name__)

INITIALIZE_TASK = "buildscope:initialize"


class ProjectRegistry:
    """
    Catalog of project definitions keyed by dotted name.

    PATTERN: Top-level projects evaluate inside define(); sub-projects are
    deferred to the end of their parent's definition, unless a lookup pulls
    them forward first
    CRITICAL: A project is fully evaluated before any lookup returns it
    GOTCHA: Two definitions that look each other up fail with
    CircularEvaluationError
    """

    def __init__(
        self,
        config: Optional[BuildConfig] = None,
        tasks: Optional[TaskManager] = None,
        attributes: Optional[AttributeRegistry] = None,
    ):
        """
        Initialize the registry.

        Args:
            config: Build configuration (loads from environment if None)
            tasks: Task namespace (creates one for the configured mode if None)
            attributes: Attribute accessors (built-in attributes if None)
        """
        self.config = config or BuildConfig()
        self.tasks = tasks or TaskManager(scheduler=scheduler_for(self.config))
        self.attributes = attributes or default_attribute_registry()
        self._projects: Dict[str, ProjectNode] = {}
        self._on_define: List[Callable[[ProjectNode], Any]] = []
        self._evaluating: List[str] = []
        self._define_initialize_task()

    @property
    def current_scope(self) -> List[str]:
        return self.tasks.current_scope

    def define(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        body: Optional[ProjectBody] = None,
    ) -> ProjectNode:
        """
        Define a new project.

        Args:
            name: Full dotted name, e.g. "foo:bar" for sub-project "bar" of "foo"
            attributes: Attribute values applied before the body runs
            body: Definition body, called with the project

        Returns:
            The project; evaluated if top-level, pending otherwise

        Raises:
            InvalidNestingError: Parent is not the active scope
            DuplicateProjectError: Name already defined
            ParentMissingError: Parent project not defined
        """
        segments = _split(name)
        name = ":".join(segments)
        parent_scope = segments[:-1]

        if self.current_scope != parent_scope:
            raise InvalidNestingError(name, self.current_scope)
        if name in self._projects:
            raise DuplicateProjectError(name)

        parent = None
        if parent_scope:
            parent = self._projects.get(":".join(parent_scope))
            if parent is None:
                raise ParentMissingError(name, ":".join(parent_scope))

        project = ProjectNode(name, self, parent=parent)
        self._projects[name] = project

        # Attributes first, the body may use them.
        self.attributes.apply(project, attributes or {})
        project.enhance(self._run_on_define)
        if body is not None:
            project.enhance(body)

        if parent is not None:
            parent.add_subproject(project)
            logger.debug(f"Defined project {name} (deferred until {parent.name} completes)")
        else:
            logger.debug(f"Defined project {name}")
            self.evaluate(project)
        return project

    def evaluate(self, project: ProjectNode) -> ProjectNode:
        """
        Run a project's definition, once.

        Args:
            project: Project to evaluate

        Returns:
            The evaluated project

        Raises:
            CircularEvaluationError: The project is already being evaluated
        """
        if project.state is ProjectState.EVALUATED:
            return project
        if project.state is ProjectState.EVALUATING:
            raise CircularEvaluationError(
                project.name, self._evaluating + [project.name]
            )

        project.state = ProjectState.EVALUATING
        self._evaluating.append(project.name)
        logger.debug(f"Evaluating project {project.name}")
        try:
            with self.tasks.in_namespace(project.scope):
                # Actions may append more actions (sub-projects, on-define enhancements).
                index = 0
                while index < len(project.actions):
                    project.actions[index](project)
                    index += 1
        finally:
            self._evaluating.pop()

        project.state = ProjectState.EVALUATED
        logger.debug(f"Evaluated project {project.name}")
        return project

    def resolve(self, name: str, scope: Optional[str] = None) -> ProjectNode:
        """
        Find a project and make sure it is evaluated.

        With a scope, tries the name relative to the scope and then to each
        of its ancestors, ending with the name itself; the first hit wins.

        Args:
            name: Project name, relative to scope or absolute
            scope: Name of the project to search from

        Returns:
            The evaluated project

        Raises:
            ProjectNotFoundError: No candidate is defined
        """
        segments = _split(name)
        scope_segments = _split(scope) if scope else []

        for depth in range(len(scope_segments), -1, -1):
            candidate = ":".join(scope_segments[:depth] + segments)
            project = self._reach(candidate)
            if project is not None:
                return self.evaluate(project)

        raise ProjectNotFoundError(":".join(segments), scope)

    def resolve_many(
        self,
        names: Optional[Iterable[str]] = None,
        scope: Optional[str] = None,
    ) -> List[ProjectNode]:
        """
        Find several projects, each evaluated, sorted by name.

        Args:
            names: Project names, possibly nested in lists; all projects (or
                the scope's children) if None
            scope: Name of the project to search from

        Returns:
            Evaluated projects sorted by name
        """
        names = list(dict.fromkeys(_flatten([names or []])))
        if names:
            found = {project.name: project for project in (self.resolve(n, scope) for n in names)}
            return [found[key] for key in sorted(found)]

        if scope:
            parent = self._projects.get(scope)
            if parent is None:
                raise ProjectNotFoundError(scope)
            if parent.state is ProjectState.PENDING:
                self.evaluate(parent)
            # A child evaluating further up the stack is returned as it is.
            children = [
                child if child.state is ProjectState.EVALUATING else self.evaluate(child)
                for child in parent.subprojects
            ]
            return sorted(children, key=lambda project: project.name)

        while True:
            pending = [
                project for project in self._projects.values()
                if project.state is ProjectState.PENDING
            ]
            if not pending:
                break
            for project in pending:
                self.evaluate(project)
        return [self._projects[key] for key in sorted(self._projects)]

    def _reach(self, name: str) -> Optional[ProjectNode]:
        """Look up a name, evaluating pending ancestors on its path first."""
        segments = name.split(":")
        for depth in range(1, len(segments)):
            ancestor = self._projects.get(":".join(segments[:depth]))
            if ancestor is None:
                return None
            if ancestor.state is ProjectState.PENDING:
                self.evaluate(ancestor)
        return self._projects.get(name)

    def on_define(self, callback: Callable[[ProjectNode], Any]) -> Callable[[ProjectNode], Any]:
        """
        Register code to run for every project, before its definition body.

        To do work at the end of a definition instead, call
        project.enhance() from the callback.
        """
        if not callable(callback):
            raise TypeError(f"on_define callback must be callable (type={type(callback).__name__})")
        self._on_define.append(callback)
        return callback

    def _run_on_define(self, project: ProjectNode) -> None:
        for callback in list(self._on_define):
            callback(project)

    def declare_inherited_attribute(
        self,
        name: str,
        default: Any = None,
        factory: Optional[Callable[[ProjectNode], Any]] = None,
    ) -> InheritedAttribute:
        return self.attributes.declare_inherited(name, default=default, factory=factory)

    def clear(self) -> None:
        """Discard all project definitions and their tasks."""
        logger.debug(f"Clearing {len(self._projects)} projects")
        self._projects.clear()
        self._evaluating.clear()
        self.tasks.clear()
        self._define_initialize_task()

    # Local projects

    def local_projects(self, directory=None) -> List[ProjectNode]:
        """
        Projects whose base directory is the given (or working) directory.

        Walks up to parent directories until a project matches, stopping at
        the working directory or the filesystem root.
        """
        working_dir = _normalize(self.config.working_dir)
        current = _normalize(directory or working_dir)
        while True:
            matches = [p for p in self.resolve_many() if p.base_dir == current]
            if matches or current == working_dir or current.parent == current:
                return matches
            current = current.parent

    def local_task(
        self,
        name: str,
        message: Optional[Callable[[str], str]] = None,
    ) -> TaskHandle:
        """
        Define a top-level task that runs the same-named task of local projects.

        Running "build" from a project's base directory runs "<project>:build".

        Args:
            name: Task name
            message: Called with the project name; the result is logged when verbose
        """

        def run_local(task: TaskHandle) -> None:
            projects = self.local_projects()
            if not projects:
                logger.warning(f"No projects defined for directory {self.config.working_dir}")
                return
            for project in projects:
                if message is not None and self.config.verbose:
                    logger.info(message(project.name))
                # Created empty when the project does not define it.
                self.tasks.define_task(name, scope=project.scope).invoke()

        return self.tasks.define_task(name, action=run_local, scope=[])

    def task_in_parent_project(self, task_name: str) -> Optional[TaskHandle]:
        """
        The same task one project up.

        "foo:bar:test" gives "foo:test"; "foo:test" gives None.
        """
        namespace = task_name.split(":")
        last_name = namespace.pop()
        if namespace:
            namespace.pop()
        if not namespace:
            return None
        return self.tasks.lookup(":".join(namespace + [last_name]), [])

    def _define_initialize_task(self) -> None:
        self.tasks.define_task(
            INITIALIZE_TASK, action=lambda task: self.resolve_many(), scope=[]
        )

    # Reporting

    def describe(self) -> List[ProjectSummary]:
        return [self._projects[key].summary() for key in sorted(self._projects)]

    def __contains__(self, name: str) -> bool:
        return name in self._projects

    def __len__(self) -> int:
        return len(self._projects)


def _split(name: Optional[str]) -> List[str]:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Project name must be a non-empty string")
    segments = [segment.strip() for segment in name.strip().split(":")]
    if any(not segment for segment in segments):
        raise ValueError(f"Project name has an empty segment: {name!r}")
    return segments


def _flatten(names) -> Iterator[str]:
    for name in names:
        if isinstance(name, str):
            yield name
        else:
            yield from _flatten(name)
