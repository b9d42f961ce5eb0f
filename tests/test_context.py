import logging
from typing import Annotated

import pytest

from beanstalk.context import ApplicationContext
from beanstalk.decorators import bean
from beanstalk.domain import FactoryDescriptor
from beanstalk.errors import (
    AmbiguousDependencyError,
    BeanNotFoundError,
    CircularDependencyError,
    ConstructionError,
    ContextAlreadyInitializedError,
    ContextNotInitializedError,
    UnresolvableDependencyError,
)
from beanstalk.registry import ComponentRegistry


class DataSource:
    def __init__(self, url: str = "plain"):
        self.url = url


class Repository:
    def __init__(self, data_source: DataSource):
        self.data_source = data_source


class Left:
    def __init__(self, right: "Right"):
        self.right = right


class Right:
    def __init__(self, left: Left):
        self.left = left


@pytest.fixture
def registry() -> ComponentRegistry:
    return ComponentRegistry()


def make_context(registry: ComponentRegistry) -> ApplicationContext:
    context = ApplicationContext(registry)
    context.init()
    return context


def test_components_are_wired_by_type(registry):
    @registry.register
    class Repository:
        pass

    @registry.register
    class Service:
        def __init__(self, repository: Repository):
            self.repository = repository

    context = make_context(registry)

    assert context.bean_names() == ["repository", "service"]
    assert isinstance(context.get("repository"), Repository)
    assert context.get("service").repository is context.get("repository")


def test_bean_method_output_is_injected(registry):
    @registry.register
    class AppConfig:
        def __init__(self):
            self.calls = 0

        @bean(name="dataSource")
        def data_source(self) -> DataSource:
            self.calls += 1
            return DataSource("from-config")

    registry.register(Repository)

    context = make_context(registry)

    assert context["repository"].data_source is context["dataSource"]
    assert context["dataSource"].url == "from-config"
    assert context["appConfig"].calls == 1


def test_shared_dependencies_are_created_once(registry):
    created = []

    @registry.register
    class Store:
        def __init__(self):
            created.append(self)

    @registry.register
    class Reader:
        def __init__(self, store: Store):
            self.store = store

    @registry.register
    class Writer:
        def __init__(self, store: Store):
            self.store = store

    @registry.register
    class Facade:
        def __init__(self, reader: Reader, writer: Writer):
            self.reader = reader
            self.writer = writer

    context = make_context(registry)

    facade = context["facade"]
    assert len(created) == 1
    assert facade.reader.store is facade.writer.store is context["store"]


def test_every_component_and_factory_is_registered(registry):
    @registry.register
    class AppConfig:
        @bean
        def greeting(self) -> str:
            return "hello"

        @bean
        def answer(self) -> int:
            return 42

    @registry.register
    class Greeter:
        def __init__(self, greeting: str):
            self.greeting = greeting

    context = make_context(registry)

    assert sorted(context.bean_names()) == ["answer", "appConfig", "greeter", "greeting"]
    assert len(context.bean_names()) == len(registry)
    assert context["greeter"].greeting == "hello"


def test_bean_method_takes_precedence_over_constructing_the_type(registry):
    registry.register(DataSource)

    @registry.register
    class AppConfig:
        @bean
        def primary_data_source(self) -> DataSource:
            return DataSource("from-factory")

    registry.register(Repository)

    context = make_context(registry)

    assert context["dataSource"] is context["primary_data_source"]
    assert context["dataSource"].url == "from-factory"
    assert context["repository"].data_source is context["primary_data_source"]


def test_bean_method_named_after_produced_component(registry):
    registry.register(DataSource)

    @registry.register
    class AppConfig:
        @bean
        def dataSource(self) -> DataSource:
            return DataSource("from-factory")

    context = make_context(registry)

    assert context["dataSource"].url == "from-factory"
    assert sorted(context.bean_names()) == ["appConfig", "dataSource"]


def test_resolve_by_qualifier(registry):
    @registry.register
    class AppConfig:
        @bean
        def primary(self) -> DataSource:
            return DataSource("primary")

        @bean
        def replica(self) -> DataSource:
            return DataSource("replica")

    @registry.register
    class ReportService:
        def __init__(self, data_source: Annotated[DataSource, "replica"]):
            self.data_source = data_source

    context = make_context(registry)

    assert context["reportService"].data_source is context["replica"]


def test_bean_method_parameters_are_injected(registry):
    registry.register(DataSource)
    registry.register(Repository)

    @registry.register
    class AppConfig:
        @bean
        def reporting(self, repository: Repository) -> dict:
            return {"repository": repository}

        @bean
        def auditing(
            self,
            repository: Annotated[Repository, "repository"],
            *,
            reporting: Annotated[dict, "reporting"],
        ) -> list:
            return [repository, reporting]

    context = make_context(registry)

    assert context["reporting"]["repository"] is context["repository"]
    assert context["auditing"][0] is context["repository"]
    assert context["auditing"][1] is context["reporting"]


def test_component_with_custom_new_is_wired_through_init(registry):
    registry.register(DataSource)
    registry.register(Repository)

    @registry.register
    class Service:
        _instance = None

        def __new__(cls, *args, **kwargs):
            if cls._instance is None:
                cls._instance = super().__new__(cls)
            return cls._instance

        def __init__(self, repository: Repository):
            self.repository = repository

    context = make_context(registry)

    assert context["service"].repository is context["repository"]


def test_ambiguous_bean_methods_raise(registry):
    @registry.register
    class AppConfig:
        @bean
        def primary(self) -> DataSource:
            return DataSource("primary")

        @bean
        def replica(self) -> DataSource:
            return DataSource("replica")

    registry.register(Repository)

    with pytest.raises(AmbiguousDependencyError, match="multiple bean methods provide it") as error:
        make_context(registry)
    assert error.value.bean_name == "repository"


def test_dependency_cycle_detected(registry):
    registry.register(Left)
    registry.register(Right)

    with pytest.raises(CircularDependencyError, match="Circular dependency: left -> right -> left") as error:
        make_context(registry)
    assert error.value.cycle == ["left", "right", "left"]


def test_cycle_through_bean_method_detected(registry):
    @registry.register
    class AppConfig:
        def __init__(self, repository: Repository):
            self.repository = repository

        @bean
        def data_source(self) -> DataSource:
            return DataSource()

    registry.register(Repository)

    with pytest.raises(CircularDependencyError, match="appConfig -> repository -> data_source -> appConfig"):
        make_context(registry)


def test_missing_dependency_raises(registry):
    @registry.register
    class Service:
        def __init__(self, repository: Repository):
            self.repository = repository

    with pytest.raises(UnresolvableDependencyError, match="No component or bean method provides Repository"):
        make_context(registry)


def test_missing_qualified_dependency_raises(registry):
    @registry.register
    class Service:
        def __init__(self, url: Annotated[str, "dbUrl"]):
            self.url = url

    with pytest.raises(UnresolvableDependencyError, match="No bean named 'dbUrl'"):
        make_context(registry)


def test_bean_method_on_unregistered_class_raises(registry):
    class Orphan:
        def make(self) -> DataSource:
            return DataSource()

    registry.register_factory(FactoryDescriptor("make", Orphan, Orphan.make, DataSource, []))

    with pytest.raises(UnresolvableDependencyError, match="not a registered component"):
        make_context(registry)


def test_construction_failure_is_reported_with_cause(registry):
    @registry.register
    class Broken:
        def __init__(self):
            raise RuntimeError("boom")

    with pytest.raises(ConstructionError, match="Failed to create bean 'broken': boom") as error:
        make_context(registry)
    assert isinstance(error.value.__cause__, RuntimeError)
    assert error.value.bean_name == "broken"


def test_failed_init_leaves_context_uninitialized_and_can_be_retried(registry):
    attempts = []

    @registry.register
    class Healthy:
        pass

    @registry.register
    class Flaky:
        def __init__(self):
            attempts.append(self)
            if len(attempts) == 1:
                raise RuntimeError("not yet")

    context = ApplicationContext(registry)
    with pytest.raises(ConstructionError):
        context.init()

    assert not context.initialized
    with pytest.raises(ContextNotInitializedError):
        context.get("healthy")

    context.init()
    assert context.initialized
    assert context["flaky"] is attempts[-1]


def test_lookup_before_init_raises(registry):
    context = ApplicationContext(registry)

    with pytest.raises(ContextNotInitializedError, match="call init\\(\\) first"):
        context.get("anything")
    with pytest.raises(ContextNotInitializedError):
        "anything" in context


def test_unknown_bean_name_raises(registry):
    @registry.register
    class Service:
        pass

    context = make_context(registry)

    assert "service" in context
    assert "missing" not in context
    with pytest.raises(BeanNotFoundError, match="No bean named 'missing'"):
        context.get("missing")
    with pytest.raises(KeyError):
        context["missing"]


def test_init_twice_raises(registry):
    context = make_context(registry)

    with pytest.raises(ContextAlreadyInitializedError):
        context.init()


def test_bean_creation_is_logged(registry, caplog):
    @registry.register
    class Service:
        pass

    caplog.set_level(logging.INFO, logger="beanstalk")
    make_context(registry)

    assert "Created bean: service" in caplog.messages
