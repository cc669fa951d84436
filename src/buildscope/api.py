"""
Module-level build definition functions.

These operate on one process-wide ProjectRegistry, created on first use:

    from buildscope import api

    def myapp(project):
        project.version = "1.1"
        project.define("webapp", body=lambda webapp: webapp.project("beans"))
        project.define("beans")

    api.define("myapp", body=myapp)
    [p.name for p in api.projects()]
    => ["myapp", "myapp:beans", "myapp:webapp"]
"""

from typing import Any, Callable, Dict, List, Optional

from .core.attributes import InheritedAttribute
from .core.project import ProjectBody, ProjectNode
from .core.registry import ProjectRegistry
from .tasks.task import TaskHandle

_registry: Optional[ProjectRegistry] = None


def get_registry() -> ProjectRegistry:
    global _registry
    if _registry is None:
        _registry = ProjectRegistry()
    return _registry


def set_registry(registry: Optional[ProjectRegistry]) -> None:
    """Replace the process-wide registry (None recreates it on next use)."""
    global _registry
    _registry = registry


def define(
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
    body: Optional[ProjectBody] = None,
) -> ProjectNode:
    return get_registry().define(name, attributes, body)


def project(name: str, scope: Optional[str] = None) -> ProjectNode:
    return get_registry().resolve(name, scope=scope)


def projects(*names: str, scope: Optional[str] = None) -> List[ProjectNode]:
    return get_registry().resolve_many(list(names) or None, scope=scope)


def on_define(callback: Callable[[ProjectNode], Any]) -> Callable[[ProjectNode], Any]:
    return get_registry().on_define(callback)


def declare_inherited_attribute(
    name: str,
    default: Any = None,
    factory: Optional[Callable[[ProjectNode], Any]] = None,
) -> InheritedAttribute:
    return get_registry().declare_inherited_attribute(name, default=default, factory=factory)


def task_in_parent_project(task_name: str) -> Optional[TaskHandle]:
    return get_registry().task_in_parent_project(task_name)


def clear() -> None:
    get_registry().clear()
