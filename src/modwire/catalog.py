from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Iterable
from typing import Any

from modwire.exceptions import InvalidRegistrationError
from modwire.injection import Inject
from modwire.providers import (
    InjectionPoint,
    Lifecycle,
    ProviderDescriptor,
    normalize_dependencies,
)
from modwire.tokens import ScopeId, Token

logger = logging.getLogger(__name__)


def collect_injection_points(cls: type[Any]) -> tuple[InjectionPoint, ...]:
    """Collect ``Inject`` attributes across the MRO, subclasses overriding bases.

    Raises:
        InvalidRegistrationError: If ``cls`` declares injection points but its
            instances have no ``__dict__`` to receive them.

    """
    points: dict[str, InjectionPoint] = {}
    for klass in reversed(cls.__mro__):
        for name, attribute in vars(klass).items():
            if isinstance(attribute, Inject):
                points[name] = attribute.point
            elif name in points:
                del points[name]
    if points and not cls.__dictoffset__:
        msg = (
            f"{cls.__qualname__} declares injection points but its instances have no "
            "__dict__; add \"__dict__\" to __slots__ or drop __slots__."
        )
        raise InvalidRegistrationError(msg)
    return tuple(points.values())


class DescriptorCatalog:
    """Holds provider descriptors produced at class-definition time.

    The catalog maps classes to ``ProviderDescriptor`` values so the class
    objects themselves never carry hidden registration state. Classes that were
    never described get a default descriptor built on demand.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type[Any], ProviderDescriptor] = {}
        self._lock = threading.Lock()

    def describe(
        self,
        cls: type[Any],
        *,
        token: Token | None = None,
        lifecycle: Lifecycle | None = None,
        scope: ScopeId | None = None,
        dependencies: Iterable[Any] = (),
    ) -> ProviderDescriptor:
        """Build and store the descriptor for ``cls``.

        Args:
            cls: The class being declared as a provider.
            token: Override token. Defaults to the class itself.
            lifecycle: Lifecycle tag, or ``None`` to use the container default.
            scope: Scope tag used when the class is registered without an
                explicit scope.
            dependencies: Ordered tokens or ``DependencyEdge`` values passed to
                the constructor as positional arguments.

        Returns:
            The stored descriptor.

        Raises:
            InvalidRegistrationError: If ``cls`` is not a class.

        """
        if not inspect.isclass(cls):
            msg = f"Only classes can be described as providers, got {cls!r}."
            raise InvalidRegistrationError(msg)

        descriptor = ProviderDescriptor(
            constructor=cls,
            token=cls if token is None else token,
            lifecycle=lifecycle,
            scope=scope,
            dependencies=normalize_dependencies(dependencies),
            injection_points=collect_injection_points(cls),
        )
        with self._lock:
            self._descriptors[cls] = descriptor
        logger.debug("Described provider %s as %r", cls.__qualname__, descriptor.token)
        return descriptor

    def get(self, cls: type[Any]) -> ProviderDescriptor:
        """Return the stored descriptor for ``cls`` or a default one."""
        descriptor = self._descriptors.get(cls)
        if descriptor is not None:
            return descriptor
        if not inspect.isclass(cls):
            msg = f"Only classes can be registered as class providers, got {cls!r}."
            raise InvalidRegistrationError(msg)
        return ProviderDescriptor(
            constructor=cls,
            token=cls,
            injection_points=collect_injection_points(cls),
        )

    def forget(self, cls: type[Any]) -> None:
        with self._lock:
            self._descriptors.pop(cls, None)

    def __contains__(self, cls: object) -> bool:
        return cls in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


default_catalog = DescriptorCatalog()
"""Catalog shared by the module-level ``service`` decorator and new containers."""
