from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

from modwire.tokens import ScopeId, Token


class Lifecycle(Enum):
    """Defines how often a class provider is instantiated."""

    SINGLETON = "singleton"
    """One instance per registration, cached on the provider record."""

    TRANSIENT = "transient"
    """A new instance is created every time the token is resolved."""


@dataclass(frozen=True, slots=True)
class DependencyEdge:
    """A provider's need for the service behind ``token``.

    ``scope`` names the registry to look the token up in. When it is ``None``
    the lookup happens in the scope the declaring provider is resolved in.
    A ``lazy`` edge is passed to the constructor as a ``LazyReference``.
    """

    token: Token
    scope: ScopeId | None = None
    lazy: bool = False


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """An attribute that receives a dependency after construction."""

    name: str
    token: Token
    lazy: bool = False
    scope: ScopeId | None = None


@dataclass(frozen=True, kw_only=True)
class ProviderDescriptor:
    """Declarative provider metadata produced by the annotation layer.

    ``lifecycle`` and ``scope`` are ``None`` when the class did not name one;
    the container then falls back to its defaults.
    """

    constructor: type[Any]
    token: Token
    lifecycle: Lifecycle | None = None
    scope: ScopeId | None = None
    dependencies: tuple[DependencyEdge, ...] = ()
    injection_points: tuple[InjectionPoint, ...] = ()


@dataclass(kw_only=True, slots=True)
class ClassProvider:
    """A registered, constructable class plus its dependency metadata."""

    constructor: type[Any]
    lifecycle: Lifecycle
    dependencies: list[DependencyEdge] = field(default_factory=list)
    injection_points: tuple[InjectionPoint, ...] = ()
    cached_instance: Any | None = None

    def has_dependency(self, token: Token) -> bool:
        """Return whether an edge for ``token`` is already declared."""
        return any(edge.token == token for edge in self.dependencies)

    def add_dependency(self, edge: DependencyEdge) -> bool:
        """Append ``edge`` unless an edge for the same token exists.

        Returns:
            ``True`` when the edge was added.

        """
        if self.has_dependency(edge.token):
            return False
        self.dependencies.append(edge)
        return True

    def clear_cache(self) -> None:
        self.cached_instance = None


@dataclass(frozen=True, slots=True)
class ValueProvider:
    """A pre-resolved value. The stored value is its own cache."""

    value: Any


ProviderRecord: TypeAlias = ClassProvider | ValueProvider


def normalize_dependencies(dependencies: Iterable[Any]) -> tuple[DependencyEdge, ...]:
    """Turn bare tokens into ``DependencyEdge`` values, keeping order."""
    return tuple(
        dependency if isinstance(dependency, DependencyEdge) else DependencyEdge(dependency)
        for dependency in dependencies
    )
