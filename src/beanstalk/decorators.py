"""Markers picked up by :func:`beanstalk.scanner.scan`.

    >>> @configuration
    ... class AppConfig:
    ...     @bean
    ...     def dataSource(self) -> DataSource:
    ...         return DataSource("sqlite://")
    >>>
    >>> @component
    ... class Repository:
    ...     def __init__(self, data_source: DataSource):
    ...         self.data_source = data_source
"""

import inspect
from typing import Any, Callable, Optional

__all__ = ["component", "configuration", "bean", "is_component", "bean_name_of"]

_COMPONENT_MARKER = "__beanstalk_component__"
_BEAN_MARKER = "__beanstalk_bean__"


def set_metadata(target: Any, marker: str, value: Any) -> Any:
    setattr(target, marker, value)
    return target


def component(cls: type) -> type:
    """Mark a class as a component to be constructed by the container."""
    if not inspect.isclass(cls):
        raise TypeError(f"@component can only decorate classes, not {cls!r}")
    return set_metadata(cls, _COMPONENT_MARKER, True)


configuration = component
"""Alias of :func:`component` for classes that declare bean methods."""


def bean(func: Optional[Callable] = None, *, name: Optional[str] = None) -> Callable:
    """Mark a method as a factory for a bean.

    The bean is registered under the method's own name unless ``name`` is given.
    Usable bare (``@bean``) or with arguments (``@bean(name="dataSource")``).
    """

    def decorator(target: Callable) -> Callable:
        if not inspect.isfunction(target):
            raise TypeError(f"@bean can only decorate functions, not {target!r}")
        return set_metadata(target, _BEAN_MARKER, name or target.__name__)

    if func is None:
        return decorator
    return decorator(func)


def is_component(cls: type) -> bool:
    """True if ``cls`` itself (not a base class) is marked and can be instantiated.

    Abstract classes and protocols are treated as marker types and excluded.
    """
    return (
        vars(cls).get(_COMPONENT_MARKER, False)
        and not inspect.isabstract(cls)
        and not vars(cls).get("_is_protocol", False)
    )


def bean_name_of(func: Any) -> Optional[str]:
    """The bean name recorded by :func:`bean`, or None if ``func`` is not a bean method."""
    return getattr(func, _BEAN_MARKER, None)
