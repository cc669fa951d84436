"""Errors raised while defining and resolving projects and tasks."""

from typing import Optional, Sequence


class BuildDefinitionError(Exception):
    """Base class for failures during the build-definition phase."""

    pass


class DuplicateProjectError(BuildDefinitionError):
    """Raised when a project name is defined more than once."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"You cannot define the same project ({name}) more than once")


class InvalidNestingError(BuildDefinitionError):
    """Raised when a sub-project is defined outside its parent's definition."""

    def __init__(self, name: str, active_scope: Sequence[str]):
        self.name = name
        self.active_scope = list(active_scope)
        scope = ":".join(self.active_scope) or "<top-level>"
        super().__init__(
            f"You can only define a sub project ({name}) within the definition "
            f"of its parent project (active scope: {scope})"
        )


class ProjectNotFoundError(BuildDefinitionError):
    """Raised when a project name does not resolve."""

    def __init__(self, name: str, scope: Optional[str] = None):
        self.name = name
        self.scope = scope
        message = f"No such project {name}"
        if scope:
            message += f" (searched from {scope})"
        super().__init__(message)


class ParentMissingError(BuildDefinitionError):
    """Raised when a dotted project name refers to an undefined parent."""

    def __init__(self, name: str, parent_name: str):
        self.name = name
        self.parent_name = parent_name
        super().__init__(f"No parent project {parent_name} for {name}")


class CircularEvaluationError(BuildDefinitionError):
    """Raised when a project's evaluation is re-entered while in progress."""

    def __init__(self, name: str, chain: Sequence[str]):
        self.name = name
        self.chain = list(chain)
        super().__init__(
            f"Circular evaluation of project {name}: {' -> '.join(self.chain)}"
        )


class TaskNotFoundError(BuildDefinitionError):
    """Raised when a task is referenced but not defined."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"No such task {name}")


class BaseDirAlreadySetError(BuildDefinitionError):
    """Raised when a base directory is set twice, or after it was read."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Cannot set base directory of {name} twice, or after reading its value"
        )


class UnknownAttributeError(BuildDefinitionError, AttributeError):
    """Raised when assigning or reading an attribute nobody declared."""

    def __init__(self, name: str, available: Sequence[str] = ()):
        self.name = name
        known = ", ".join(sorted(available)) or "<none>"
        super().__init__(f"Unknown project attribute: {name} (available: {known})")


class CircularDependencyError(BuildDefinitionError):
    """Raised when a task is reached again through its own prerequisites."""

    def __init__(self, name: str, chain: Sequence[str]):
        self.name = name
        self.chain = list(chain)
        super().__init__(f"Circular dependency detected: {' => '.join(self.chain)}")
