"""Exceptions raised while discovering and wiring components."""

from typing import Optional

__all__ = [
    "DependencyError",
    "DiscoveryError",
    "InitializerError",
    "ConstructionError",
    "UnresolvableDependencyError",
    "AmbiguousDependencyError",
    "CircularDependencyError",
    "DuplicateBeanNameError",
    "ContextNotInitializedError",
    "ContextAlreadyInitializedError",
    "BeanNotFoundError",
]


class DependencyError(Exception):
    """Raised when a component's dependency cannot be resolved or is misannotated.

    Attributes:
        bean_name: Name of the bean being registered or built when the error
            occurred, if there is one.
    """

    def __init__(self, message: str, bean_name: Optional[str] = None):
        super().__init__(message)
        self.bean_name = bean_name


class DiscoveryError(DependencyError):
    """Raised when a base package or one of its modules cannot be imported."""


class InitializerError(DependencyError):
    """Raised when a component type exposes no usable ``__init__`` signature."""


class ConstructionError(DependencyError):
    """Raised when a constructor or bean method fails when invoked."""


class UnresolvableDependencyError(DependencyError):
    """Raised when no component or factory satisfies a parameter."""


class AmbiguousDependencyError(DependencyError):
    """Raised when several factories produce the type a parameter asks for."""


class CircularDependencyError(DependencyError):
    """Raised when a bean is requested again while it is still being built."""

    def __init__(self, cycle: list[str]):
        super().__init__(f"Circular dependency: {' -> '.join(cycle)}", cycle[0])
        self.cycle = cycle


class DuplicateBeanNameError(DependencyError):
    pass


class ContextNotInitializedError(DependencyError):
    pass


class ContextAlreadyInitializedError(DependencyError):
    pass


class BeanNotFoundError(DependencyError, KeyError):
    pass
