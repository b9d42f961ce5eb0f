"""Beanstalk inversion-of-control container.

Beanstalk discovers component classes and bean methods, either by scanning a
base package or from an explicit registry, and builds the complete object graph
eagerly. Each bean is created exactly once and can then be looked up by name.

Key Features:
    - Package scanning for ``@component`` / ``@configuration`` classes
    - Bean methods (``@bean``) that take precedence over direct construction
    - Type-based injection from ``__init__`` and bean method type hints
    - Explicit qualifiers with ``Annotated[T, "bean name"]``
    - Circular dependency detection
    - Read-only bean map once initialized

Basic Usage:
    >>> from beanstalk.context import ApplicationContext
    >>> from beanstalk.decorators import bean, component, configuration
    >>>
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
    >>>
    >>> context = ApplicationContext("myapp")
    >>> context.init()
    >>> repository = context.get("repository")

The container consists of several modules:
    - context: ApplicationContext, the init()/get() entry point
    - graph_builder: Dependency resolution and instantiation
    - registry: The registration table of components and bean methods
    - scanner: Package scanning
    - decorators: @component, @configuration and @bean markers
    - introspection: Reading dependencies from signatures and type hints
    - domain: Core domain models (Dependency, ComponentDescriptor, FactoryDescriptor)
    - errors: Container-specific exceptions
"""
