from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Literal, TypeVar, overload

from modwire.catalog import default_catalog
from modwire.providers import Lifecycle
from modwire.tokens import ScopeId, Token

C = TypeVar("C", bound=type[Any])


@overload
def service(
    cls: C,
    *,
    token: Token | None = None,
    lifecycle: Lifecycle | None = None,
    scope: ScopeId | None = None,
    dependencies: Iterable[Any] = (),
) -> C: ...


@overload
def service(
    cls: Literal["from_decorator"] = "from_decorator",
    *,
    token: Token | None = None,
    lifecycle: Lifecycle | None = None,
    scope: ScopeId | None = None,
    dependencies: Iterable[Any] = (),
) -> Callable[[C], C]: ...


def service(
    cls: C | Literal["from_decorator"] = "from_decorator",
    *,
    token: Token | None = None,
    lifecycle: Lifecycle | None = None,
    scope: ScopeId | None = None,
    dependencies: Iterable[Any] = (),
) -> C | Callable[[C], C]:
    """Declare a class as a provider in the shared descriptor catalog.

    The decorator only records metadata; nothing is registered in any
    container. List the class in a ``Module`` or call
    ``Container.register_class`` to make it resolvable.

    Args:
        cls: Class to declare, or ``"from_decorator"`` to use decorator form.
        token: Override token. Defaults to the class itself.
        lifecycle: ``Lifecycle.SINGLETON`` or ``Lifecycle.TRANSIENT``; ``None``
            uses the container default.
        scope: Scope tag used when the class is registered without one.
        dependencies: Ordered tokens or ``DependencyEdge`` values passed to the
            constructor as positional arguments.

    Returns:
        The decorated class in direct form, or a decorator callable in decorator
        form.

    Raises:
        InvalidRegistrationError: If applied to something that is not a class.

    Examples:
        .. code-block:: python

            @service(token="Greeter", lifecycle=Lifecycle.TRANSIENT, dependencies=["Config"])
            class Greeter:
                def __init__(self, config: Config) -> None:
                    self.config = config

    """
    dependencies = tuple(dependencies)

    def decorator(decorated: C) -> C:
        default_catalog.describe(
            decorated,
            token=token,
            lifecycle=lifecycle,
            scope=scope,
            dependencies=dependencies,
        )
        return decorated

    if cls == "from_decorator":
        return decorator
    return decorator(cls)
