"""Tests for the modwire_container pytest fixture."""

from __future__ import annotations

import pytest

from modwire import Container, Module, Provide

pytest_plugins = ["modwire.integrations.pytest_plugin"]

_seen: list[Container] = []


class _Service:
    pass


def test_fixture_provides_container(modwire_container: Container) -> None:
    modwire_container.register_class(_Service)

    assert modwire_container.resolve(_Service) is modwire_container.resolve(_Service)
    _seen.append(modwire_container)


def test_fixture_is_fresh_per_test(modwire_container: Container) -> None:
    assert not modwire_container.is_registered(_Service)
    assert all(container is not modwire_container for container in _seen)


def test_previous_container_was_reset() -> None:
    assert _seen
    assert _seen[0].registry_size() == 0


def test_fixture_bootstraps_modules(modwire_container: Container) -> None:
    modwire_container.bootstrap(Module(providers=[Provide("Config", use_value="cfg")], scope="request"))

    assert modwire_container.resolve("Config", scope="request") == "cfg"


@pytest.fixture()
def seeded_container(modwire_container: Container) -> Container:
    modwire_container.register_value("Greeting", "hello")
    return modwire_container


def test_fixture_composes(seeded_container: Container) -> None:
    assert seeded_container.resolve("Greeting") == "hello"
