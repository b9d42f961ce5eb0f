"""Discover components by walking a package namespace."""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from beanstalk.decorators import is_component
from beanstalk.errors import DiscoveryError
from beanstalk.registry import ComponentRegistry

__all__ = ["scan"]

logger = logging.getLogger(__name__)


def scan(base_package: str) -> ComponentRegistry:
    """Import ``base_package`` and all of its submodules, registering components.

    Only classes defined in the scanned modules are considered, so components
    imported from elsewhere are not picked up twice. Modules are visited in name
    order, which makes registration order stable between runs.

    Args:
        base_package: Dotted name of the package (or module) to scan.

    Returns:
        A :class:`ComponentRegistry` holding the discovered components and
        their bean methods.

    Raises:
        DiscoveryError: If the package or one of its submodules cannot be imported.
    """
    registry = ComponentRegistry()
    for module in _walk_modules(base_package):
        logger.debug("Scanning module %s", module.__name__)
        for _, member in inspect.getmembers(module, inspect.isclass):
            if member.__module__ == module.__name__ and is_component(member):
                registry.register(member)
    return registry


def _walk_modules(base_package: str) -> list[ModuleType]:
    package = _import(base_package)
    modules = [package]
    if not hasattr(package, "__path__"):
        return modules

    try:
        submodule_names = sorted(
            module_info.name
            for module_info in pkgutil.walk_packages(
                package.__path__, prefix=f"{package.__name__}.", onerror=_raise_discovery_error
            )
        )
    except DiscoveryError:
        raise
    except Exception as e:
        raise DiscoveryError(f"Cannot enumerate modules of '{base_package}': {e}") from e

    modules.extend(_import(name) for name in submodule_names)
    return modules


def _import(module_name: str) -> ModuleType:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise DiscoveryError(f"Cannot import '{module_name}' while scanning: {e}") from e


def _raise_discovery_error(module_name: str):
    raise DiscoveryError(f"Cannot import '{module_name}' while scanning")
