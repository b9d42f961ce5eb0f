"""The application context: discovers components, builds them, serves lookups.

A context moves through two phases. ``init()`` discovers and builds every bean
while holding a lock; only when the whole graph has been built is the bean map
published, read-only, for lookups. If building fails nothing is published, so
the context stays uninitialized and ``init()`` may be called again.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from beanstalk.errors import (
    BeanNotFoundError,
    ContextAlreadyInitializedError,
    ContextNotInitializedError,
)
from beanstalk.graph_builder import GraphBuilder
from beanstalk.registry import ComponentRegistry
from beanstalk.scanner import scan

__all__ = ["ApplicationContext", "ComponentSource"]

logger = logging.getLogger(__name__)


ComponentSource = Union[str, ComponentRegistry]
"""Where an :class:`ApplicationContext` gets its components from.

Either the dotted name of a base package, which is scanned for ``@component``
classes on ``init()``, or an explicitly populated :class:`ComponentRegistry`.

Example:
    >>> ApplicationContext("myapp")   # Scan myapp and its submodules
    >>> ApplicationContext(registry)  # Use an explicit registration table
"""


class ApplicationContext:
    """
    A container of singleton beans, built from discovered components.

    Beans are registered under their names: the class name with a lower-cased
    first letter for components, and the method name for bean methods.

    Example:
        >>> context = ApplicationContext("myapp")
        >>> context.init()
        >>> service = context.get("service")
    """

    def __init__(self, source: ComponentSource):
        self.source = source
        self._beans: Optional[Mapping[str, Any]] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._beans is not None

    def init(self):
        """Discover all components and build one instance of each.

        Raises:
            ContextAlreadyInitializedError: If the context was already initialized.
            DependencyError: If discovery or construction fails. The context is
                left uninitialized.
        """
        with self._lock:
            if self._beans is not None:
                raise ContextAlreadyInitializedError(
                    f"Application context for {self._describe_source()} is already initialized"
                )

            registry = scan(self.source) if isinstance(self.source, str) else self.source
            beans = GraphBuilder(registry).build()

            self._beans = MappingProxyType(beans)
            logger.info(
                "Application context for %s initialized with %d beans",
                self._describe_source(),
                len(beans),
            )

    def get(self, name: str) -> Any:
        """Return the bean registered under ``name``.

        Raises:
            ContextNotInitializedError: If ``init()`` has not completed successfully.
            BeanNotFoundError: If no bean has that name.
        """
        beans = self._published_beans()
        if name not in beans:
            raise BeanNotFoundError(f"No bean named '{name}'", name)
        return beans[name]

    def bean_names(self) -> list[str]:
        return list(self._published_beans())

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._published_beans()

    def _published_beans(self) -> Mapping[str, Any]:
        beans = self._beans
        if beans is None:
            raise ContextNotInitializedError(
                f"Application context for {self._describe_source()} is not initialized - "
                "call init() first"
            )
        return beans

    def _describe_source(self) -> str:
        if isinstance(self.source, str):
            return f"package '{self.source}'"
        return "explicit registry"
