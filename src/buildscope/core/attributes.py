"""
Inherited project attributes.

An inherited attribute resolves once per project: an explicitly set value
wins, otherwise the parent's value (resolving it on the parent first),
otherwise the default. The resolved value is cached on the project, so a
later change on the parent does not reach a child that already resolved it.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from ..exceptions import UnknownAttributeError

logger = logging.getLogger(__name__)


class AttributeAccessor(Protocol):
    """Read/write pair for one named project attribute."""

    name: str

    def read(self, node: Any) -> Any:
        ...

    def write(self, node: Any, value: Any) -> None:
        ...


class InheritedAttribute:
    """
    Memoizing resolver for an attribute that falls back to the parent.

    Also a descriptor, so it can be declared as a field on the project class:

        class ProjectNode:
            version = InheritedAttribute("version")
    """

    def __init__(
        self,
        name: str,
        default: Any = None,
        factory: Optional[Callable[[Any], Any]] = None,
    ):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Attribute name must be a non-empty string")
        if default is not None and factory is not None:
            raise ValueError(f"Attribute {name} takes a default or a factory, not both")
        self.name = name.strip()
        self.default = default
        self.factory = factory

    def resolve(self, node: Any) -> Any:
        slots: Dict[str, Any] = node.attribute_slots
        if self.name in slots:
            return slots[self.name]

        parent = node.parent
        if parent is not None:
            value = self.resolve(parent)
        elif self.factory is not None:
            value = self.factory(node)
        else:
            value = self.default

        slots[self.name] = value
        logger.debug(f"Resolved {node.name}.{self.name} = {value!r}")
        return value

    def assign(self, node: Any, value: Any) -> None:
        node.attribute_slots[self.name] = value

    def is_resolved(self, node: Any) -> bool:
        return self.name in node.attribute_slots

    read = resolve
    write = assign

    def __get__(self, node: Any, owner: Any = None) -> Any:
        if node is None:
            return self
        return self.resolve(node)

    def __set__(self, node: Any, value: Any) -> None:
        self.assign(node, value)

    def __repr__(self) -> str:
        return f"InheritedAttribute({self.name!r})"


class PropertyAccessor:
    """Accessor for a project attribute with its own getter and setter."""

    def __init__(
        self,
        name: str,
        getter: Callable[[Any], Any],
        setter: Callable[[Any, Any], None],
    ):
        self.name = name
        self._getter = getter
        self._setter = setter

    def read(self, node: Any) -> Any:
        return self._getter(node)

    def write(self, node: Any, value: Any) -> None:
        self._setter(node, value)


class AttributeRegistry:
    """
    Maps attribute names to accessors, for assignment by name.

    Populated once when the project registry is created; extension code may
    declare more inherited attributes afterwards.
    """

    def __init__(self):
        self._accessors: Dict[str, AttributeAccessor] = {}

    def register(self, accessor: AttributeAccessor) -> AttributeAccessor:
        if accessor.name in self._accessors:
            raise ValueError(f"Duplicate project attribute: {accessor.name}")
        self._accessors[accessor.name] = accessor
        return accessor

    def declare_inherited(
        self,
        name: str,
        default: Any = None,
        factory: Optional[Callable[[Any], Any]] = None,
    ) -> InheritedAttribute:
        attribute = InheritedAttribute(name, default=default, factory=factory)
        self.register(attribute)
        return attribute

    def declare_property(
        self,
        name: str,
        getter: Callable[[Any], Any],
        setter: Callable[[Any, Any], None],
    ) -> PropertyAccessor:
        accessor = PropertyAccessor(name, getter, setter)
        self.register(accessor)
        return accessor

    def get(self, name: str) -> AttributeAccessor:
        accessor = self._accessors.get(name)
        if accessor is None:
            raise UnknownAttributeError(name, self.names())
        return accessor

    def read(self, node: Any, name: str) -> Any:
        return self.get(name).read(node)

    def write(self, node: Any, name: str, value: Any) -> None:
        self.get(name).write(node, value)

    def apply(self, node: Any, attributes: Mapping[str, Any]) -> None:
        for name, value in attributes.items():
            self.write(node, name, value)

    def names(self) -> List[str]:
        return sorted(self._accessors)

    def __contains__(self, name: str) -> bool:
        return name in self._accessors
