"""Domain models used throughout the container."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

__all__ = ["Dependency", "ComponentDescriptor", "FactoryDescriptor", "bean_name_for"]


@dataclass(frozen=True)
class Dependency:
    """Represents a dependency required by a constructor or bean method.

    Attributes:
        parameter_name: The parameter name of the dependency in the signature.
        declared_type: The expected type of the dependency.
        component_name: The name of the bean that fulfils this dependency, when
            given explicitly with ``Annotated[T, "name"]``.
    """

    parameter_name: str
    declared_type: Optional[type]
    component_name: Optional[str]


@dataclass(frozen=True)
class ComponentDescriptor:
    """A constructible component type.

    Attributes:
        name: Bean name derived from the class name (see :func:`bean_name_for`).
        type: The component class.
        dependencies: Constructor parameters to resolve, in declaration order.
    """

    name: str
    type: type
    dependencies: list[Dependency]


@dataclass(frozen=True)
class FactoryDescriptor:
    """A bean method declared on a component.

    Attributes:
        name: Bean name; the method's own name unless overridden.
        owner: The declaring-context type, whose instance the method is called on.
        func: The undecorated function object, called as ``func(owner_instance, **kwargs)``.
        produced_type: The return annotation, or None if the method has none.
        dependencies: Method parameters to resolve, excluding ``self``.
    """

    name: str
    owner: type
    func: Callable[..., Any]
    produced_type: Optional[type]
    dependencies: list[Dependency]


def bean_name_for(cls: type) -> str:
    """Derive a bean name from a class name by lower-casing its first letter.

    Example:
        >>> bean_name_for(AppConfig)   # Returns "appConfig"
        >>> bean_name_for(Repository)  # Returns "repository"
    """
    name = cls.__name__
    return name[:1].lower() + name[1:]
