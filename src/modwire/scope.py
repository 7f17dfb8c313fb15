from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from modwire.exceptions import InvalidRegistrationError, ScopeAlreadyExistsError, ScopeNotFoundError
from modwire.providers import ClassProvider, ProviderRecord
from modwire.tokens import GLOBAL_SCOPE, ScopeId, Token, token_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InProgress:
    """A token currently being resolved in a scope."""

    lazy: bool = False


class ScopeContext:
    """One registry partition: providers by token plus the in-progress tracker.

    The tracker lives on the context rather than on the container, so the same
    token resolving in two independent scopes is never mistaken for a cycle.
    """

    __slots__ = ("in_progress", "registry", "scope_id")

    def __init__(self, scope_id: ScopeId | None = None) -> None:
        self.scope_id = scope_id
        self.registry: dict[Token, ProviderRecord] = {}
        self.in_progress: dict[Token, InProgress] = {}

    @property
    def is_global(self) -> bool:
        return self.scope_id is None

    def register(self, token: Token, record: ProviderRecord) -> None:
        self.registry[token] = record

    def lookup(self, token: Token) -> ProviderRecord | None:
        return self.registry.get(token)

    def mark(self, token: Token, *, lazy: bool = False) -> InProgress | None:
        """Mark ``token`` as in progress and return the entry it replaced."""
        previous = self.in_progress.get(token)
        self.in_progress[token] = InProgress(lazy=lazy)
        return previous

    def unmark(self, token: Token, previous: InProgress | None = None) -> None:
        """Drop the mark for ``token``, restoring ``previous`` when given."""
        if previous is None:
            self.in_progress.pop(token, None)
        else:
            self.in_progress[token] = previous

    def reset(self) -> None:
        """Remove every entry, dropping cached singletons first."""
        for token in list(self.registry):
            record = self.registry.pop(token)
            if isinstance(record, ClassProvider):
                record.clear_cache()
        self.in_progress.clear()

    def __contains__(self, token: object) -> bool:
        return token in self.registry

    def __len__(self) -> int:
        return len(self.registry)

    def __repr__(self) -> str:
        name = "global" if self.scope_id is None else token_name(self.scope_id)
        return f"ScopeContext({name!r}, providers={len(self.registry)})"


class ScopeRegistry:
    """The global context plus every named context created so far."""

    def __init__(self) -> None:
        self.global_context = ScopeContext()
        self._scopes: dict[ScopeId, ScopeContext] = {}

    @staticmethod
    def is_global(scope: ScopeId | None) -> bool:
        return scope is None or scope is GLOBAL_SCOPE

    def get(self, scope: ScopeId | None = None) -> ScopeContext:
        """Return the global context, or the named one.

        Raises:
            ScopeNotFoundError: If the named scope was never created.

        """
        if self.is_global(scope):
            return self.global_context
        context = self._scopes.get(scope)
        if context is None:
            raise ScopeNotFoundError(scope)
        return context

    def create(self, scope: ScopeId) -> ScopeContext:
        """Create a named scope.

        Raises:
            ScopeAlreadyExistsError: If the scope exists, including the global one.

        """
        if self.is_global(scope) or scope in self._scopes:
            raise ScopeAlreadyExistsError(scope)
        context = ScopeContext(scope)
        self._scopes[scope] = context
        logger.debug("Created scope %r", token_name(scope))
        return context

    def ensure(self, scope: ScopeId | None) -> ScopeContext:
        if self.is_global(scope) or scope in self._scopes:
            return self.get(scope)
        return self.create(scope)

    def delete(self, scope: ScopeId) -> None:
        if self.is_global(scope):
            msg = "The global scope cannot be deleted."
            raise InvalidRegistrationError(msg)
        context = self._scopes.pop(scope, None)
        if context is None:
            raise ScopeNotFoundError(scope)
        context.reset()
        logger.debug("Deleted scope %r", token_name(scope))

    def reset(self, scope: ScopeId | None = None) -> None:
        """Empty one registry; the scope itself stays created."""
        context = self.get(scope)
        context.reset()
        logger.debug("Reset %r", context)

    def reset_all(self) -> None:
        self.reset()
        for scope in self._scopes:
            self.reset(scope)

    def contexts(self) -> Iterator[ScopeContext]:
        yield self.global_context
        yield from self._scopes.values()

    def __contains__(self, scope: object) -> bool:
        return self.is_global(scope) or scope in self._scopes

    def __iter__(self) -> Iterator[ScopeId]:
        return iter(list(self._scopes))
