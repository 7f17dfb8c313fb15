from __future__ import annotations

from collections.abc import Iterator

import pytest

from modwire.container import Container


@pytest.fixture()
def modwire_container() -> Iterator[Container]:
    """Create a per-test container and empty every registry at teardown.

    The fixture is function-scoped, so registrations are isolated between tests
    unless users override fixture scope explicitly. Enable it with
    ``pytest_plugins = ["modwire.integrations.pytest_plugin"]`` in a
    ``conftest.py``.

    Yields:
        A new ``Container`` instance.

    """
    container = Container()
    try:
        yield container
    finally:
        container.reset_all_registries()
