"""Registration table for components and the bean methods they declare."""

import logging
from collections import defaultdict
from typing import Optional

from beanstalk.decorators import bean_name_of
from beanstalk.domain import ComponentDescriptor, FactoryDescriptor, bean_name_for
from beanstalk.errors import DuplicateBeanNameError
from beanstalk.introspection import class_dependencies, function_dependencies, return_type

__all__ = ["ComponentRegistry"]

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """Catalog of component types and factories, keyed by bean name.

    Components and factories share a single bean namespace: registering two
    entries under the same name raises :class:`DuplicateBeanNameError`. The one
    exception is a factory named after a component type it produces, since both
    entries then refer to the factory's output.

    Example:
        >>> registry = ComponentRegistry()
        >>>
        >>> @registry.register
        ... class Repository:
        ...     pass
        >>>
        >>> registry.component_named("repository").type is Repository
        True
    """

    def __init__(self):
        self._components: dict[str, ComponentDescriptor] = {}
        self._components_by_type: dict[type, ComponentDescriptor] = {}
        self._factories: dict[str, FactoryDescriptor] = {}
        self._factories_by_type: dict[type, list[FactoryDescriptor]] = defaultdict(list)

    @property
    def components(self) -> list[ComponentDescriptor]:
        """Registered components, in registration order."""
        return list(self._components.values())

    @property
    def factories(self) -> list[FactoryDescriptor]:
        """Registered factories, in registration order."""
        return list(self._factories.values())

    def register(self, cls: type) -> type:
        """Register a class as a component, along with its ``@bean`` methods.

        The class and its bean methods are registered together: if any of them
        fails to register, the registry is left unchanged.

        Returns the class unchanged, so this can be used as a class decorator.

        Raises:
            DuplicateBeanNameError: If the class or one of its bean methods
                uses a name that is already registered.
            DependencyError: If a constructor or bean method is misannotated.
        """
        component = ComponentDescriptor(bean_name_for(cls), cls, class_dependencies(cls))
        factories = [
            FactoryDescriptor(
                bean_name_of(attribute),
                cls,
                attribute,
                return_type(attribute),
                function_dependencies(attribute),
            )
            for attribute in vars(cls).values()
            if bean_name_of(attribute) is not None
        ]

        _check_component_name(component, self._components, self._factories)
        components = {**self._components, component.name: component}
        pending_factories = dict(self._factories)
        for factory in factories:
            _check_factory_name(factory, components, pending_factories)
            pending_factories[factory.name] = factory

        self._add_component(component)
        for factory in factories:
            self._add_factory(factory)
        return cls

    def register_component(self, descriptor: ComponentDescriptor):
        _check_component_name(descriptor, self._components, self._factories)
        self._add_component(descriptor)

    def register_factory(self, descriptor: FactoryDescriptor):
        _check_factory_name(descriptor, self._components, self._factories)
        self._add_factory(descriptor)

    def _add_component(self, descriptor: ComponentDescriptor):
        self._components[descriptor.name] = descriptor
        self._components_by_type[descriptor.type] = descriptor
        logger.info("Found component: %s", descriptor.type.__qualname__)

    def _add_factory(self, descriptor: FactoryDescriptor):
        self._factories[descriptor.name] = descriptor
        if descriptor.produced_type is not None:
            self._factories_by_type[descriptor.produced_type].append(descriptor)
        logger.info("Found bean method: %s", descriptor.func.__qualname__)

    def component_named(self, name: str) -> Optional[ComponentDescriptor]:
        return self._components.get(name)

    def component_for_type(self, component_type: type) -> Optional[ComponentDescriptor]:
        return self._components_by_type.get(component_type)

    def factory_named(self, name: str) -> Optional[FactoryDescriptor]:
        return self._factories.get(name)

    def factories_producing(self, produced_type: type) -> list[FactoryDescriptor]:
        """Factories whose declared return type is exactly ``produced_type``."""
        return list(self._factories_by_type.get(produced_type, []))

    def __len__(self) -> int:
        return len(self._components) + len(self._factories)


def _check_component_name(
    descriptor: ComponentDescriptor,
    components: dict[str, ComponentDescriptor],
    factories: dict[str, FactoryDescriptor],
):
    factory = factories.get(descriptor.name)
    if descriptor.name in components or (
        factory is not None and factory.produced_type is not descriptor.type
    ):
        raise DuplicateBeanNameError(
            f"Duplicate bean name '{descriptor.name}' for component "
            f"{descriptor.type.__qualname__}",
            descriptor.name,
        )


def _check_factory_name(
    descriptor: FactoryDescriptor,
    components: dict[str, ComponentDescriptor],
    factories: dict[str, FactoryDescriptor],
):
    existing = components.get(descriptor.name)
    if descriptor.name in factories or (
        existing is not None and existing.type is not descriptor.produced_type
    ):
        raise DuplicateBeanNameError(
            f"Duplicate bean name '{descriptor.name}' for bean method "
            f"{descriptor.func.__qualname__}",
            descriptor.name,
        )
