from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from modwire.providers import InjectionPoint
from modwire.tokens import ScopeId, Token, token_name

if TYPE_CHECKING:
    from modwire.container import Container

T = TypeVar("T")

_LAZY_ATTRIBUTE_PREFIX = "__modwire_lazy_"


def lazy_attribute_name(name: str) -> str:
    """Return the instance ``__dict__`` key holding the lazy reference for ``name``."""
    return f"{_LAZY_ATTRIBUTE_PREFIX}{name}"


class LazyReference(Generic[T]):
    """A deferred accessor for one dependency.

    The first ``get()`` resolves the token through the container; the result is
    kept on the reference for as long as the reference lives, whatever the
    lifecycle of the underlying provider.
    """

    __slots__ = ("_container", "_resolved", "_value", "scope", "token")

    def __init__(self, container: Container, token: Token, scope: ScopeId | None = None) -> None:
        self._container = container
        self.token = token
        self.scope = scope
        self._value: Any = None
        self._resolved = False

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    def get(self) -> T:
        """Resolve on first access and return the cached result afterwards."""
        if self._resolved:
            return self._value
        with self._container.locked():
            if not self._resolved:
                self._value = self._container.resolve(self.token, scope=self.scope)
                self._resolved = True
        return self._value

    def __call__(self) -> T:
        return self.get()

    def __repr__(self) -> str:
        state = "resolved" if self._resolved else "pending"
        return f"LazyReference({token_name(self.token)!r}, {state})"


class Inject:
    """Mark a class attribute as an injection point.

    The container fills the attribute after the instance is constructed. Eager
    points receive the resolved value directly; lazy points install a
    ``LazyReference`` and resolve on first attribute access.

    Examples:
        .. code-block:: python

            @service(token="ServiceB")
            class ServiceB:
                service_a = Inject("ServiceA", lazy=True)

                def value(self) -> str:
                    return self.service_a.value() + "B"

    """

    def __init__(self, token: Token, *, lazy: bool = False, scope: ScopeId | None = None) -> None:
        self.token = token
        self.lazy = lazy
        self.scope = scope
        self.name = ""

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self.name = name

    @property
    def point(self) -> InjectionPoint:
        return InjectionPoint(name=self.name, token=self.token, lazy=self.lazy, scope=self.scope)

    def __get__(self, instance: Any, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        reference = vars(instance).get(lazy_attribute_name(self.name))
        if reference is None:
            msg = (
                f"{type(instance).__qualname__}.{self.name} was not injected; "
                "resolve the instance through a container."
            )
            raise AttributeError(msg)
        return reference.get()

    def __repr__(self) -> str:
        return f"Inject({token_name(self.token)!r}, lazy={self.lazy})"
