"""Project definition core: attributes, projects and the registry."""

from .attributes import AttributeRegistry, InheritedAttribute, PropertyAccessor
from .project import ProjectNode, default_attribute_registry
from .registry import INITIALIZE_TASK, ProjectRegistry

__all__ = [
    "INITIALIZE_TASK",
    "AttributeRegistry",
    "InheritedAttribute",
    "ProjectNode",
    "ProjectRegistry",
    "PropertyAccessor",
    "default_attribute_registry",
]
