from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeAlias

Token: TypeAlias = Any
"""A service identifier: a string name, a ``UniqueToken`` or a class reference."""

ScopeId: TypeAlias = Any
"""A hashable scope identifier, usually a string or a ``UniqueToken``."""


class UniqueToken:
    """An identity-compared token, the counterpart of a unique symbol.

    Two ``UniqueToken`` objects are never equal, even with the same
    description, so they cannot collide with string names.

    Examples:
        .. code-block:: python

            LOGGER = UniqueToken("logger")

            container.register_value(LOGGER, logging.getLogger("app"))

    """

    __slots__ = ("description",)

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"UniqueToken({self.description!r})"


GLOBAL_SCOPE = UniqueToken("global")
"""Scope id that always names the global registry."""


def token_name(token: Token) -> str:
    """Return a human-readable name for a token, used in messages and logs."""
    if isinstance(token, str):
        return token
    if isinstance(token, UniqueToken):
        return token.description or repr(token)
    if isinstance(token, type):
        return token.__qualname__
    return repr(token)


def format_chain(tokens: Iterable[Token]) -> str:
    """Render a resolution chain as ``A -> B -> A``."""
    return " -> ".join(token_name(token) for token in tokens)
