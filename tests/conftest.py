"""Shared pytest fixtures for modwire tests."""

import pytest

from modwire.catalog import DescriptorCatalog
from modwire.container import Container
from modwire.lock_mode import LockMode
from modwire.providers import Lifecycle


@pytest.fixture()
def catalog() -> DescriptorCatalog:
    """A catalog private to one test, so descriptors never leak between tests."""
    return DescriptorCatalog()


@pytest.fixture()
def container(catalog: DescriptorCatalog) -> Container:
    """Default container: singleton lifecycle, thread locking."""
    return Container(catalog=catalog)


@pytest.fixture()
def container_transient(catalog: DescriptorCatalog) -> Container:
    """Container with transient as the default lifecycle."""
    return Container(catalog=catalog, default_lifecycle=Lifecycle.TRANSIENT)


@pytest.fixture()
def container_unlocked(catalog: DescriptorCatalog) -> Container:
    """Container with locking disabled."""
    return Container(catalog=catalog, lock_mode=LockMode.NONE)
