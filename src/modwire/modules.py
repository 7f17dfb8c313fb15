from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from typing_extensions import Self

from modwire.exceptions import InvalidRegistrationError
from modwire.providers import DependencyEdge
from modwire.tokens import ScopeId, Token, token_name


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()


@dataclass(frozen=True, slots=True)
class Bind:
    """Graft a dependency on ``from_`` onto the importing module's ``to`` provider.

    The edge is only added when the provider does not already declare one for
    ``from_``; explicit declarations are never duplicated or overridden.
    """

    to: Token
    from_: Token
    in_scope: ScopeId | None = None

    def edge(self) -> DependencyEdge:
        return DependencyEdge(self.from_, scope=self.in_scope)


@dataclass(frozen=True)
class Provide:
    """An explicit provider declaration for ``token``.

    Exactly one of ``use_class``, ``use_value`` or ``use_factory`` must be set.
    Factories are invoked once, at bootstrap time, without injection; their
    result is registered as a value.
    """

    token: Token
    use_class: type[Any] | None = None
    use_value: Any = MISSING
    use_factory: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        given = [
            name
            for name, is_set in (
                ("use_class", self.use_class is not None),
                ("use_value", self.use_value is not MISSING),
                ("use_factory", self.use_factory is not None),
            )
            if is_set
        ]
        if len(given) != 1:
            msg = (
                f"Provider for {token_name(self.token)!r} must set exactly one of "
                f"use_class, use_value or use_factory, got {given or 'none'}."
            )
            raise InvalidRegistrationError(msg)
        if self.use_class is not None and not inspect.isclass(self.use_class):
            msg = f"use_class for {token_name(self.token)!r} must be a class, got {self.use_class!r}."
            raise InvalidRegistrationError(msg)
        if self.use_factory is not None and not callable(self.use_factory):
            msg = f"use_factory for {token_name(self.token)!r} must be callable."
            raise InvalidRegistrationError(msg)

    @property
    def has_value(self) -> bool:
        return self.use_value is not MISSING


ProviderDeclaration: TypeAlias = type[Any] | Provide
"""A bare class (registered under its own token) or an explicit ``Provide``."""


@dataclass(frozen=True)
class Import:
    """An imported module plus the bind rules applied to the importer."""

    module: Module
    binds: tuple[Bind, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.module, Module):
            msg = f"Only modules can be imported, got {self.module!r}."
            raise InvalidRegistrationError(msg)
        object.__setattr__(self, "binds", tuple(self.binds))


@dataclass(eq=False)
class Module:
    """A declarative bundle of providers and imported modules.

    Modules compare by identity, so the same module reached through several
    import paths is bootstrapped once.

    Examples:
        .. code-block:: python

            x_module = Module(providers=[Provide("ServiceX", use_class=ServiceX)])
            y_module = Module(
                providers=[Provide("ServiceY", use_class=ServiceY)],
                imports=[Import(x_module, binds=[Bind(to="ServiceY", from_="ServiceX")])],
            )

    """

    providers: list[ProviderDeclaration] = field(default_factory=list)
    imports: list[Import] = field(default_factory=list)
    scope: ScopeId | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        self.providers = [_check_declaration(provider) for provider in self.providers]
        self.imports = [_as_import(item) for item in self.imports]

    def add_provider(self, provider: ProviderDeclaration) -> Self:
        self.providers.append(_check_declaration(provider))
        return self

    def add_import(self, module: Module, binds: Iterable[Bind] = ()) -> Self:
        self.imports.append(Import(module, tuple(binds)))
        return self

    def __repr__(self) -> str:
        label = self.name or f"0x{id(self):x}"
        return f"Module({label}, providers={len(self.providers)}, imports={len(self.imports)})"


def _check_declaration(provider: Any) -> ProviderDeclaration:
    if isinstance(provider, Provide) or inspect.isclass(provider):
        return provider
    msg = f"Module providers must be classes or Provide declarations, got {provider!r}."
    raise InvalidRegistrationError(msg)


def _as_import(item: Any) -> Import:
    if isinstance(item, Import):
        return item
    return Import(item)
