"""Signature introspection for component constructors and bean methods.

These helpers turn ``__init__`` signatures and bean method signatures into
:class:`~beanstalk.domain.Dependency` lists, using standard type hints:

    >>> class Service:
    ...     def __init__(self, repository: Repository, url: Annotated[str, "dbUrl"]):
    ...         ...
    >>> class_dependencies(Service)
    [Dependency("repository", Repository, None), Dependency("url", str, "dbUrl")]

Parameters with default values and ``*args``/``**kwargs`` are left to Python
and are never injected.
"""

import inspect
from typing import Annotated, Any, Callable, Optional, get_args, get_origin, get_type_hints

from beanstalk.domain import Dependency, bean_name_for
from beanstalk.errors import DependencyError, InitializerError

__all__ = ["class_dependencies", "function_dependencies", "return_type"]

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def class_dependencies(cls: type) -> list[Dependency]:
    """Extract dependency information from a class's ``__init__``.

    Args:
        cls: The component class to analyze.

    Returns:
        Dependency objects for each injectable constructor parameter, in order.

    Raises:
        InitializerError: If the class has no readable initializer signature.
        DependencyError: If a required parameter is not annotated.
    """
    if cls.__init__ is object.__init__:
        return []

    try:
        parameters = list(inspect.signature(cls.__init__).parameters.values())
    except (TypeError, ValueError) as e:
        raise InitializerError(
            f"No usable initializer found for {cls.__qualname__}: {e}",
            bean_name_for(cls),
        ) from e

    # drop self; read from __init__ so a custom __new__ cannot mask it
    if parameters and parameters[0].kind not in _VARIADIC:
        parameters = parameters[1:]

    hints = _type_hints(cls.__init__, cls.__qualname__)
    return [
        _make_dependency(hints.get(parameter.name), parameter.name, cls.__qualname__)
        for parameter in parameters
        if _is_injectable(parameter)
    ]


def function_dependencies(func: Callable) -> list[Dependency]:
    """Extract dependency information from a bean method, skipping ``self``.

    Raises:
        InitializerError: If the function does not take the declaring instance
            as its first parameter.
        DependencyError: If a required parameter is not annotated.
    """
    parameters = list(inspect.signature(func).parameters.values())
    if not parameters or parameters[0].kind in _VARIADIC:
        raise InitializerError(
            f"Bean method {func.__qualname__} must accept the declaring instance "
            "as its first parameter",
            func.__name__,
        )

    hints = _type_hints(func, func.__qualname__)
    return [
        _make_dependency(hints.get(parameter.name), parameter.name, func.__qualname__)
        for parameter in parameters[1:]
        if _is_injectable(parameter)
    ]


def return_type(func: Callable) -> Optional[type]:
    """Return the declared return type of ``func``, or None if it has none."""
    return_annotation = _type_hints(func, func.__qualname__).get("return", None)
    if get_origin(return_annotation) is Annotated:
        return get_args(return_annotation)[0]
    return return_annotation


def _is_injectable(parameter: inspect.Parameter) -> bool:
    return parameter.kind not in _VARIADIC and parameter.default is inspect.Parameter.empty


def _type_hints(target: Any, owner_name: str) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except NameError as e:
        raise DependencyError(
            f"Type hints of {owner_name} cannot be resolved: {e}"
        ) from e
    except TypeError:
        # builtin initializers carry no annotations
        return {}


def _make_dependency(annotation, name: str, owner_name: str) -> Dependency:
    if annotation is None:
        raise DependencyError(f"Dependency '{name}' of {owner_name} is not annotated")

    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        component_name = next((m for m in metadata if isinstance(m, str)), None)
        return Dependency(name, base_type, component_name)
    return Dependency(name, annotation, None)
