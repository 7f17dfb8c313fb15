from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from modwire.tokens import format_chain, token_name


def _scope_suffix(scope: Any) -> str:
    if scope is None:
        return ""
    return f" in scope {token_name(scope)!r}"


class ModwireError(Exception):
    """Represent a base class for all modwire-specific failures.

    Catch this type when you want to handle any modwire error path without
    matching each concrete exception class individually.
    """


class InvalidRegistrationError(ModwireError):
    """Signal an invalid registration or module declaration.

    Raised by ``Container.register_class``, ``Container.register_value`` and
    by ``Provide`` when a declaration is malformed, for example a ``Provide``
    without exactly one of ``use_class``/``use_value``/``use_factory``.
    """


class UnregisteredTokenError(ModwireError):
    """Signal that a token has no provider in the looked-up scope.

    Raised by ``Container.resolve`` and surfaced as-is from nested dependency
    resolution. Typical fixes include registering the token, bootstrapping the
    module that declares it, or resolving from the scope that owns it.
    """

    def __init__(self, token: Any, scope: Any = None) -> None:
        self.token = token
        self.scope = scope
        msg = f"Token {token_name(token)!r} is not registered{_scope_suffix(scope)}."
        super().__init__(msg)


class CircularDependencyError(ModwireError):
    """Signal a dependency cycle detected mid-resolution.

    ``chain`` holds every token currently being resolved, in call order,
    followed by the token that closed the cycle. Declaring one side of the
    cycle as lazy (``Inject(..., lazy=True)``) breaks it.
    """

    def __init__(self, token: Any, chain: Sequence[Any], scope: Any = None) -> None:
        self.token = token
        self.chain = list(chain)
        self.scope = scope
        msg = f"Circular dependency detected{_scope_suffix(scope)}: {format_chain(self.chain)}"
        super().__init__(msg)


class DependencyResolutionError(ModwireError):
    """Signal that a declared dependency resolved to an empty result.

    Any falsy value counts: ``None``, ``0``, ``""`` or an empty container.
    ``value`` holds what the provider returned.
    """

    def __init__(self, dependent: Any, token: Any, scope: Any = None, value: Any = None) -> None:
        self.dependent = dependent
        self.token = token
        self.scope = scope
        self.value = value
        msg = (
            f"Failed to resolve dependency {token_name(token)!r}{_scope_suffix(scope)} "
            f"for {token_name(dependent)!r}: the provider returned an empty result ({value!r})."
        )
        super().__init__(msg)


class ScopeNotFoundError(ModwireError):
    """Signal use of a named scope that was never created.

    Typical fix is calling ``container.create_scope(scope)`` before registering
    into or resolving from that scope.
    """

    def __init__(self, scope: Any) -> None:
        self.scope = scope
        msg = f"Scope {token_name(scope)!r} was not found."
        super().__init__(msg)


class ScopeAlreadyExistsError(ModwireError):
    """Signal a second ``create_scope`` call for the same scope id."""

    def __init__(self, scope: Any) -> None:
        self.scope = scope
        msg = f"Scope {token_name(scope)!r} already exists."
        super().__init__(msg)
