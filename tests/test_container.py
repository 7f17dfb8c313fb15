"""Tests for Container registration and resolution."""

import logging

import pytest

from modwire.catalog import DescriptorCatalog
from modwire.container import Container
from modwire.exceptions import (
    DependencyResolutionError,
    InvalidRegistrationError,
    UnregisteredTokenError,
)
from modwire.lock_mode import LockMode
from modwire.providers import ClassProvider, DependencyEdge, Lifecycle, ValueProvider
from modwire.settings import ContainerSettings
from modwire.tokens import UniqueToken


class Config:
    def __init__(self) -> None:
        self.name = "config"


class Repository:
    def __init__(self, config: Config) -> None:
        self.config = config


class Handler:
    def __init__(self, repository: Repository, config: Config) -> None:
        self.repository = repository
        self.config = config


class TestContainerInit:
    def test_defaults(self, container: Container) -> None:
        assert container.lock_mode is LockMode.THREAD
        assert container.default_lifecycle is Lifecycle.SINGLETON
        assert container.scopes == []
        assert container.registry_size() == 0

    def test_explicit_arguments_override_settings(self, catalog: DescriptorCatalog) -> None:
        settings = ContainerSettings(default_lifecycle=Lifecycle.SINGLETON, lock_mode=LockMode.THREAD)

        container = Container(
            settings,
            catalog=catalog,
            lock_mode=LockMode.NONE,
            default_lifecycle=Lifecycle.TRANSIENT,
        )

        assert container.settings is settings
        assert container.lock_mode is LockMode.NONE
        assert container.default_lifecycle is Lifecycle.TRANSIENT

    def test_containers_do_not_share_registries(self, catalog: DescriptorCatalog) -> None:
        first = Container(catalog=catalog)
        second = Container(catalog=catalog)

        first.register_class(Config)

        assert first.is_registered(Config)
        assert not second.is_registered(Config)


class TestSingletonLifecycle:
    def test_resolve_returns_same_instance(self, container: Container) -> None:
        container.register_class(Config)

        assert container.resolve(Config) is container.resolve(Config)

    def test_force_new_builds_fresh_instance_without_caching(self, container: Container) -> None:
        container.register_class(Config)
        cached = container.resolve(Config)

        fresh = container.resolve(Config, force_new=True)

        assert fresh is not cached
        assert container.resolve(Config) is cached

    def test_force_new_before_first_resolve_does_not_fill_cache(self, container: Container) -> None:
        container.register_class(Config)

        fresh = container.resolve(Config, force_new=True)

        assert container.resolve(Config) is not fresh

    def test_dependencies_of_force_new_instance_are_shared(self, container: Container) -> None:
        container.register_class(Config)
        container.register_class(Repository, dependencies=[Config])

        first = container.resolve(Repository, force_new=True)
        second = container.resolve(Repository, force_new=True)

        assert first is not second
        assert first.config is second.config

    def test_reregistration_replaces_cached_instance(self, container: Container) -> None:
        container.register_class(Config)
        old = container.resolve(Config)

        container.register_class(Config)

        assert container.resolve(Config) is not old


class TestTransientLifecycle:
    def test_resolve_returns_new_instance_each_time(self, container: Container) -> None:
        container.register_class(Config, lifecycle=Lifecycle.TRANSIENT)

        assert container.resolve(Config) is not container.resolve(Config)

    def test_default_lifecycle_applies_to_untagged_classes(self, container_transient: Container) -> None:
        container_transient.register_class(Config)

        assert container_transient.resolve(Config) is not container_transient.resolve(Config)

    def test_descriptor_lifecycle_wins_over_default(
        self,
        container_transient: Container,
        catalog: DescriptorCatalog,
    ) -> None:
        catalog.describe(Config, lifecycle=Lifecycle.SINGLETON)
        container_transient.register_class(Config)

        assert container_transient.resolve(Config) is container_transient.resolve(Config)


class TestDependencies:
    def test_dependencies_passed_positionally_in_order(self, container: Container) -> None:
        container.register_class(Config)
        container.register_class(Repository, dependencies=[Config])
        container.register_class(Handler, dependencies=[Repository, Config])

        handler = container.resolve(Handler)

        assert isinstance(handler.repository, Repository)
        assert handler.config is container.resolve(Config)
        assert handler.repository.config is handler.config

    def test_descriptor_dependencies_used_by_default(
        self,
        container: Container,
        catalog: DescriptorCatalog,
    ) -> None:
        catalog.describe(Repository, token="Repository", dependencies=["Config"])
        container.register_value("Config", Config())

        token = container.register_class(Repository)

        assert token == "Repository"
        assert container.resolve("Repository").config is container.resolve("Config")

    def test_missing_dependency_names_missing_token(self, container: Container) -> None:
        container.register_class(Repository, dependencies=["Config"])

        with pytest.raises(UnregisteredTokenError) as exc_info:
            container.resolve(Repository)

        assert exc_info.value.token == "Config"
        assert "is not registered" in str(exc_info.value)

    def test_dependency_resolving_to_none_fails(self, container: Container) -> None:
        container.register_value("Config", None)
        container.register_class(Repository, dependencies=["Config"])

        with pytest.raises(DependencyResolutionError) as exc_info:
            container.resolve(Repository)

        assert exc_info.value.dependent is Repository
        assert exc_info.value.token == "Config"

    @pytest.mark.parametrize("empty", [0, "", [], {}])
    def test_falsy_dependency_values_fail(self, container: Container, empty: object) -> None:
        container.register_value("Config", empty)
        container.register_class(Repository, token="Repository", dependencies=["Config"])

        with pytest.raises(DependencyResolutionError) as exc_info:
            container.resolve("Repository")

        assert exc_info.value.value == empty
        assert container.in_progress_tokens() == []

    def test_falsy_value_resolves_at_top_level(self, container: Container) -> None:
        container.register_value("Zero", 0)

        assert container.resolve("Zero") == 0

    def test_explicit_edge_objects_are_accepted(self, container: Container) -> None:
        container.register_value("Config", "value")
        container.register_class(Repository, dependencies=[DependencyEdge("Config")])

        assert container.resolve(Repository).config == "value"

    def test_unique_tokens_do_not_collide_with_strings(self, container: Container) -> None:
        token = UniqueToken("Config")
        container.register_value(token, "unique")
        container.register_value("Config", "named")

        assert container.resolve(token) == "unique"
        assert container.resolve("Config") == "named"


class TestUnregistered:
    def test_unregistered_token_raises(self, container: Container) -> None:
        with pytest.raises(UnregisteredTokenError, match="is not registered"):
            container.resolve("Missing")

    def test_unregistered_class_token_uses_qualname(self, container: Container) -> None:
        with pytest.raises(UnregisteredTokenError) as exc_info:
            container.resolve(Config)

        assert "'Config' is not registered" in str(exc_info.value)


class TestRegisterClass:
    def test_register_class_rejects_non_class(self, container: Container) -> None:
        with pytest.raises(InvalidRegistrationError):
            container.register_class(Config())  # type: ignore[arg-type]

    def test_register_class_with_override_token(self, container: Container) -> None:
        token = container.register_class(Config, token="settings")

        assert token == "settings"
        assert container.is_registered("settings")
        assert not container.is_registered(Config)

    def test_register_record_stores_class_provider(self, container: Container) -> None:
        record = ClassProvider(constructor=Config, lifecycle=Lifecycle.SINGLETON)

        container.register_record("Config", record)

        assert isinstance(container.resolve("Config"), Config)
        assert record.cached_instance is container.resolve("Config")


class TestRegisterValue:
    def test_value_returned_verbatim(self, container: Container) -> None:
        value = {"debug": True}
        container.register_value("Settings", value)

        assert container.resolve("Settings") is value
        assert container.resolve("Settings", force_new=True) is value

    def test_class_object_is_stored_uninstantiated(self, container: Container) -> None:
        container.register_value("ConfigType", Config)

        assert container.resolve("ConfigType") is Config

    def test_construct_instantiates_class(self, container: Container) -> None:
        container.register_value("Config", Config, construct=True)

        resolved = container.resolve("Config")

        assert isinstance(resolved, Config)
        assert container.resolve("Config") is resolved

    def test_construct_with_resolve_dependencies(
        self,
        container: Container,
        catalog: DescriptorCatalog,
    ) -> None:
        catalog.describe(Repository, dependencies=["Config"])
        container.register_value("Config", Config())

        container.register_value("Repository", Repository, resolve_dependencies=True, construct=True)

        repository = container.resolve("Repository")
        assert isinstance(repository, Repository)
        assert repository.config is container.resolve("Config")
        assert container.in_progress_tokens() == []

    def test_construct_requires_class(self, container: Container) -> None:
        with pytest.raises(InvalidRegistrationError):
            container.register_value("Config", Config(), construct=True)

    def test_resolve_dependencies_builds_class(
        self,
        container: Container,
        catalog: DescriptorCatalog,
    ) -> None:
        catalog.describe(Repository, dependencies=["Config"])
        container.register_value("Config", Config())

        container.register_value("Repository", Repository, True)

        repository = container.resolve("Repository")
        assert isinstance(repository, Repository)
        assert repository.config is container.resolve("Config")
        assert container.resolve("Repository") is repository

    def test_resolve_dependencies_without_edges(self, container: Container) -> None:
        container.register_value("Config", Config, resolve_dependencies=True)

        assert isinstance(container.resolve("Config"), Config)

    def test_resolve_dependencies_requires_class(self, container: Container) -> None:
        with pytest.raises(InvalidRegistrationError, match="resolve_dependencies=True requires a class"):
            container.register_value("Config", Config(), resolve_dependencies=True)

    def test_value_replaces_class_provider(self, container: Container) -> None:
        container.register_class(Config, token="Config")
        container.resolve("Config")

        container.register_value("Config", "plain")

        assert container.resolve("Config") == "plain"


class TestLogging:
    def test_registration_and_construction_logged_at_debug(
        self,
        container: Container,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="modwire")

        container.register_class(Config)
        container.resolve(Config)

        messages = [record.getMessage() for record in caplog.records]
        assert any("Registered" in message for message in messages)
        assert any("Constructing Config" in message for message in messages)


class TestRepr:
    def test_repr_lists_scopes(self, container: Container) -> None:
        container.create_scope("request")
        container.register_value("Config", Config(), scope="request")

        text = repr(container)

        assert "ScopeContext('global', providers=0)" in text
        assert "ScopeContext('request', providers=1)" in text

    def test_value_provider_repr_is_dataclass(self) -> None:
        assert repr(ValueProvider(1)) == "ValueProvider(value=1)"
