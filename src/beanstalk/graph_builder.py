"""
Module for resolving and instantiating registered components into a bean map.

Resolution is a depth-first walk of the dependency graph. Every bean is built
at most once: each request first consults the beans built so far, and only
builds (after recursively resolving its own dependencies) on a miss. Names of
beans that are still being built are kept on a stack, so a request for one of
them means the graph has a cycle and resolution fails instead of recursing
forever.

A type requested as a dependency is satisfied by the factory producing it, if
there is one, in preference to constructing the type directly.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from beanstalk.domain import ComponentDescriptor, Dependency, FactoryDescriptor
from beanstalk.errors import (
    AmbiguousDependencyError,
    CircularDependencyError,
    ConstructionError,
    UnresolvableDependencyError,
)
from beanstalk.registry import ComponentRegistry

__all__ = ["GraphBuilder"]

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Build one instance per registered component and factory.

    A builder is single use: call :meth:`build` once and discard it. On failure
    the partially populated bean map is simply dropped with the builder.
    """

    def __init__(self, registry: ComponentRegistry):
        self._registry = registry
        self._beans: dict[str, Any] = {}
        self._resolving: list[str] = []

    def build(self) -> dict[str, Any]:
        """Instantiate every component, then every factory.

        Returns:
            Mapping of bean names to instances.

        Raises:
            DependencyError: If any bean cannot be resolved or constructed.
        """
        for component in self._registry.components:
            self.ensure_component(component)
        for factory in self._registry.factories:
            self.ensure_factory(factory)
        return self._beans

    def ensure_component(self, descriptor: ComponentDescriptor) -> Any:
        """Return the instance for a component type, building it if necessary."""
        if descriptor.name in self._beans:
            return self._beans[descriptor.name]

        factory = self._unique_factory_for(descriptor.type, descriptor.name)
        if factory is not None:
            instance = self.ensure_factory(factory)
            logger.debug("Bean '%s' is provided by bean method '%s'", descriptor.name, factory.name)
        else:
            with self._resolving_bean(descriptor.name):
                kwargs = self.resolve_dependencies(descriptor.dependencies, descriptor.name)
                instance = _invoke(descriptor.name, descriptor.type, kwargs)
            logger.info("Created bean: %s", descriptor.name)

        self._beans[descriptor.name] = instance
        return instance

    def ensure_factory(self, descriptor: FactoryDescriptor) -> Any:
        """Return the instance produced by a bean method, invoking it if necessary."""
        if descriptor.name in self._beans:
            return self._beans[descriptor.name]

        with self._resolving_bean(descriptor.name):
            owner = self._registry.component_for_type(descriptor.owner)
            if owner is None:
                raise UnresolvableDependencyError(
                    f"Bean method '{descriptor.name}' is declared on "
                    f"{descriptor.owner.__qualname__}, which is not a registered component",
                    descriptor.name,
                )
            owner_instance = self.ensure_component(owner)
            kwargs = self.resolve_dependencies(descriptor.dependencies, descriptor.name)
            instance = _invoke(descriptor.name, descriptor.func, kwargs, owner_instance)

        self._beans[descriptor.name] = instance
        logger.info("Created bean: %s", descriptor.name)
        return instance

    def resolve_dependencies(self, dependencies: list[Dependency], requested_by: str) -> dict[str, Any]:
        """Resolve each dependency to an instance, keyed by parameter name."""
        return {
            dependency.parameter_name: self._resolve(dependency, requested_by)
            for dependency in dependencies
        }

    def _resolve(self, dependency: Dependency, requested_by: str) -> Any:
        if dependency.component_name is not None:
            return self._resolve_by_name(dependency, requested_by)

        factory = self._unique_factory_for(dependency.declared_type, requested_by)
        if factory is not None:
            return self.ensure_factory(factory)

        component = self._registry.component_for_type(dependency.declared_type)
        if component is None:
            raise UnresolvableDependencyError(
                f"No component or bean method provides {_type_name(dependency.declared_type)} "
                f"for parameter '{dependency.parameter_name}' of '{requested_by}'",
                requested_by,
            )
        return self.ensure_component(component)

    def _resolve_by_name(self, dependency: Dependency, requested_by: str) -> Any:
        name = dependency.component_name
        factory = self._registry.factory_named(name)
        if factory is not None:
            return self.ensure_factory(factory)

        component = self._registry.component_named(name)
        if component is not None:
            return self.ensure_component(component)

        raise UnresolvableDependencyError(
            f"No bean named '{name}' for parameter '{dependency.parameter_name}' "
            f"of '{requested_by}'",
            requested_by,
        )

    def _unique_factory_for(
        self, requested_type: type, requested_by: str
    ) -> Optional[FactoryDescriptor]:
        factories = self._registry.factories_producing(requested_type)
        if len(factories) > 1:
            raise AmbiguousDependencyError(
                f"'{requested_by}' depends on type {_type_name(requested_type)}, "
                f"but multiple bean methods provide it: {[f.name for f in factories]} - "
                "select one with Annotated[T, \"<bean name>\"]",
                requested_by,
            )
        return factories[0] if factories else None

    @contextmanager
    def _resolving_bean(self, name: str) -> Iterator[None]:
        if name in self._resolving:
            raise CircularDependencyError(self._resolving[self._resolving.index(name):] + [name])

        self._resolving.append(name)
        try:
            yield
        finally:
            self._resolving.pop()


def _invoke(bean_name: str, target: Callable, kwargs: dict[str, Any], *args: Any) -> Any:
    try:
        return target(*args, **kwargs)
    except Exception as e:
        raise ConstructionError(f"Failed to create bean '{bean_name}': {e}", bean_name) from e


def _type_name(declared_type: Any) -> str:
    return getattr(declared_type, "__qualname__", repr(declared_type))
