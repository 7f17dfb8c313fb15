from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Any, Literal, TypeVar, overload

from modwire.bootstrap import ModuleBootstrapper
from modwire.catalog import DescriptorCatalog, default_catalog
from modwire.exceptions import (
    CircularDependencyError,
    DependencyResolutionError,
    InvalidRegistrationError,
    UnregisteredTokenError,
)
from modwire.injection import LazyReference, lazy_attribute_name
from modwire.lock_mode import LockMode
from modwire.modules import Module
from modwire.providers import (
    ClassProvider,
    InjectionPoint,
    Lifecycle,
    ProviderDescriptor,
    ProviderRecord,
    ValueProvider,
    normalize_dependencies,
)
from modwire.scope import ScopeContext, ScopeRegistry
from modwire.settings import ContainerSettings
from modwire.tokens import ScopeId, Token, token_name

logger = logging.getLogger(__name__)

T = TypeVar("T")
C = TypeVar("C", bound=type[Any])

_LazyIntents = list[tuple[ScopeContext, Token]]


class Container:
    """Dependency injection container owning a global scope and named scopes.

    Providers are registered directly (``register_class``, ``register_value``)
    or by bootstrapping a ``Module`` graph, then resolved with ``resolve``.
    Several containers may coexist in one process; each owns its registries.

    Args:
        settings: Container defaults. Loaded from ``MODWIRE_*`` environment
            variables when omitted.
        catalog: Descriptor catalog consulted for class metadata. Defaults to
            the catalog filled by the module-level ``service`` decorator.
        lock_mode: Overrides ``settings.lock_mode``.
        default_lifecycle: Overrides ``settings.default_lifecycle``.

    """

    def __init__(
        self,
        settings: ContainerSettings | None = None,
        *,
        catalog: DescriptorCatalog | None = None,
        lock_mode: LockMode | None = None,
        default_lifecycle: Lifecycle | None = None,
    ) -> None:
        self._settings = settings if settings is not None else ContainerSettings()
        self._catalog = catalog if catalog is not None else default_catalog
        self._lock_mode = lock_mode if lock_mode is not None else self._settings.lock_mode
        self._default_lifecycle = (
            default_lifecycle if default_lifecycle is not None else self._settings.default_lifecycle
        )
        self._scopes = ScopeRegistry()
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if self._lock_mode is LockMode.THREAD else nullcontext()
        )
        # Tokens being resolved, across scopes, in call order.
        self._path: list[Token] = []

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    @property
    def catalog(self) -> DescriptorCatalog:
        return self._catalog

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @property
    def default_lifecycle(self) -> Lifecycle:
        return self._default_lifecycle

    def locked(self) -> AbstractContextManager[Any]:
        """Return the container lock, a no-op context in ``LockMode.NONE``."""
        return self._lock

    # Scopes

    def create_scope(self, scope: ScopeId) -> None:
        """Create an empty named scope.

        Raises:
            ScopeAlreadyExistsError: If the scope was already created.

        """
        with self._lock:
            self._scopes.create(scope)

    def ensure_scope(self, scope: ScopeId | None) -> None:
        """Create ``scope`` unless it exists."""
        with self._lock:
            self._scopes.ensure(scope)

    def delete_scope(self, scope: ScopeId) -> None:
        """Remove a named scope together with its providers.

        Raises:
            ScopeNotFoundError: If the scope was never created.
            InvalidRegistrationError: If asked to delete the global scope.

        """
        with self._lock:
            self._scopes.delete(scope)

    def has_scope(self, scope: ScopeId | None) -> bool:
        return scope in self._scopes

    def scope_id_of(self, scope: ScopeId | None) -> ScopeId | None:
        """Return the canonical id of ``scope``: ``None`` for global.

        Raises:
            ScopeNotFoundError: If the named scope was never created.

        """
        return self._scopes.get(scope).scope_id

    @property
    def scopes(self) -> list[ScopeId]:
        """Ids of every created named scope, in creation order."""
        return list(self._scopes)

    def reset_registry(self, scope: ScopeId | None = None) -> None:
        """Empty one registry, dropping cached singletons.

        The scope stays created. Nothing is re-registered afterwards: class
        descriptors survive in the catalog, so ``register_class`` or
        ``bootstrap`` restores the providers when needed.
        """
        with self._lock:
            self._scopes.reset(scope)

    def reset_all_registries(self) -> None:
        """Empty the global registry and every named registry."""
        with self._lock:
            self._scopes.reset_all()

    def registry_size(self, scope: ScopeId | None = None) -> int:
        return len(self._scopes.get(scope))

    def is_registered(self, token: Token, scope: ScopeId | None = None) -> bool:
        return token in self._scopes.get(scope)

    def in_progress_tokens(self, scope: ScopeId | None = None) -> list[Token]:
        """Tokens currently marked in the scope's resolution tracker."""
        return list(self._scopes.get(scope).in_progress)

    # Registration

    def register_record(self, token: Token, record: ProviderRecord, scope: ScopeId | None = None) -> None:
        """Store a provider record, replacing any previous one for ``token``."""
        with self._lock:
            context = self._scopes.get(scope)
            previous = context.lookup(token)
            if isinstance(previous, ClassProvider):
                previous.clear_cache()
            context.register(token, record)
        logger.debug("Registered %r for %r in %r", record, token_name(token), context)

    def class_provider_for(
        self,
        descriptor: ProviderDescriptor,
        *,
        lifecycle: Lifecycle | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> ClassProvider:
        """Build a fresh ``ClassProvider`` from a descriptor.

        The record owns its dependency list, so grafting edges onto it never
        touches the descriptor or other containers.
        """
        edges = (
            normalize_dependencies(dependencies)
            if dependencies is not None
            else descriptor.dependencies
        )
        return ClassProvider(
            constructor=descriptor.constructor,
            lifecycle=lifecycle or descriptor.lifecycle or self._default_lifecycle,
            dependencies=list(edges),
            injection_points=descriptor.injection_points,
        )

    def register_class(
        self,
        cls: type[Any],
        *,
        token: Token | None = None,
        lifecycle: Lifecycle | None = None,
        scope: ScopeId | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> Token:
        """Register ``cls`` as a class provider.

        Explicit arguments win over the class descriptor from the catalog.

        Args:
            cls: Class to construct on resolution.
            token: Token to register under. Defaults to the descriptor token.
            lifecycle: Lifecycle override.
            scope: Target scope. Defaults to the descriptor scope tag, then global.
            dependencies: Ordered constructor dependencies overriding the
                descriptor's.

        Returns:
            The token the class was registered under.

        Raises:
            InvalidRegistrationError: If ``cls`` is not a class.
            ScopeNotFoundError: If the target scope was never created.

        """
        if not inspect.isclass(cls):
            msg = f"Class providers must be classes, got {cls!r}."
            raise InvalidRegistrationError(msg)
        descriptor = self._catalog.get(cls)
        record = self.class_provider_for(descriptor, lifecycle=lifecycle, dependencies=dependencies)
        registered_token = descriptor.token if token is None else token
        self.register_record(registered_token, record, descriptor.scope if scope is None else scope)
        return registered_token

    @overload
    def service(
        self,
        cls: C,
        *,
        token: Token | None = None,
        lifecycle: Lifecycle | None = None,
        scope: ScopeId | None = None,
        dependencies: Iterable[Any] = (),
    ) -> C: ...

    @overload
    def service(
        self,
        cls: Literal["from_decorator"] = "from_decorator",
        *,
        token: Token | None = None,
        lifecycle: Lifecycle | None = None,
        scope: ScopeId | None = None,
        dependencies: Iterable[Any] = (),
    ) -> Callable[[C], C]: ...

    def service(
        self,
        cls: C | Literal["from_decorator"] = "from_decorator",
        *,
        token: Token | None = None,
        lifecycle: Lifecycle | None = None,
        scope: ScopeId | None = None,
        dependencies: Iterable[Any] = (),
    ) -> C | Callable[[C], C]:
        """Describe a class in the catalog and register it in this container.

        Examples:
            .. code-block:: python

                @container.service(token="ServiceB", dependencies=["ServiceA"])
                class ServiceB:
                    def __init__(self, service_a: ServiceA) -> None:
                        self.service_a = service_a

        """
        dependencies = tuple(dependencies)

        def decorator(decorated: C) -> C:
            self._catalog.describe(
                decorated,
                token=token,
                lifecycle=lifecycle,
                scope=scope,
                dependencies=dependencies,
            )
            self.register_class(decorated)
            return decorated

        if cls == "from_decorator":
            return decorator
        return decorator(cls)

    def register_value(
        self,
        token: Token,
        value: Any,
        resolve_dependencies: bool = False,
        scope: ScopeId | None = None,
        *,
        construct: bool = False,
    ) -> None:
        """Register a pre-resolved value for ``token``.

        The value is stored as-is, even when it is a class object. With
        ``resolve_dependencies=True`` a class is built now with its declared
        dependencies and injection points, and the instance is stored. Pass
        ``construct=True`` alone to call the class without arguments.

        Raises:
            InvalidRegistrationError: If ``construct`` or ``resolve_dependencies``
                is set for a value that is not a class.

        """
        if construct or resolve_dependencies:
            if not inspect.isclass(value):
                flag = "resolve_dependencies" if resolve_dependencies else "construct"
                msg = f"{flag}=True requires a class, got {value!r}."
                raise InvalidRegistrationError(msg)
            if resolve_dependencies:
                record = self.class_provider_for(self._catalog.get(value), lifecycle=Lifecycle.TRANSIENT)
                with self._lock:
                    value = self._build_tracked(token, record, scope)
            else:
                value = value()
        self.register_record(token, ValueProvider(value), scope)

    def bootstrap(self, module: Module) -> None:
        """Register every provider reachable from ``module``.

        Nothing is resolved here; missing tokens and cycles surface on the
        first ``resolve`` of an affected token.
        """
        with self._lock:
            ModuleBootstrapper(self).bootstrap(module)

    # Resolution

    @overload
    def resolve(self, token: type[T], force_new: bool = False, scope: ScopeId | None = None) -> T: ...

    @overload
    def resolve(self, token: Any, force_new: bool = False, scope: ScopeId | None = None) -> Any: ...

    def resolve(self, token: Any, force_new: bool = False, scope: ScopeId | None = None) -> Any:
        """Return a live instance for ``token``.

        Singletons are cached on their provider record; ``force_new`` builds a
        one-off instance without touching the cache. Dependencies are resolved
        depth-first in declaration order and passed as positional arguments.

        Args:
            token: The token to resolve.
            force_new: Build a new instance even for a cached singleton.
            scope: Scope to look the token up in. ``None`` means global.

        Returns:
            The resolved instance or registered value.

        Raises:
            UnregisteredTokenError: If the token, or a dependency, has no provider.
            CircularDependencyError: If the token is already being resolved eagerly.
            DependencyResolutionError: If a dependency resolved to ``None``.
            ScopeNotFoundError: If a named scope was never created.

        """
        with self._lock:
            return self._resolve(token, force_new=force_new, scope=scope)

    def _resolve(self, token: Token, *, force_new: bool, scope: ScopeId | None) -> Any:
        context = self._scopes.get(scope)
        scope = context.scope_id
        with self._frame(context, token) as intents:
            record = context.lookup(token)
            if record is None:
                raise UnregisteredTokenError(token, scope)

            if isinstance(record, ValueProvider):
                return record.value

            is_cached = record.lifecycle is Lifecycle.SINGLETON and not force_new
            if is_cached and record.cached_instance is not None:
                logger.debug("Cache hit for %r", token_name(token))
                return record.cached_instance

            instance = self._build(token, record, scope, intents)
            if is_cached:
                record.cached_instance = instance
            return instance

    def _build_tracked(self, token: Token, record: ClassProvider, scope: ScopeId | None) -> Any:
        context = self._scopes.get(scope)
        with self._frame(context, token) as intents:
            return self._build(token, record, context.scope_id, intents)

    @contextmanager
    def _frame(self, context: ScopeContext, token: Token) -> Iterator[_LazyIntents]:
        entry = context.in_progress.get(token)
        if entry is not None and not entry.lazy:
            raise CircularDependencyError(token, [*self._path, token], context.scope_id)

        previous = context.mark(token)
        self._path.append(token)
        intents: _LazyIntents = []
        try:
            yield intents
        finally:
            for intent_context, intent_token in intents:
                current = intent_context.in_progress.get(intent_token)
                if current is not None and current.lazy:
                    intent_context.unmark(intent_token)
            self._path.pop()
            context.unmark(token, previous)

    def _build(
        self,
        token: Token,
        record: ClassProvider,
        scope: ScopeId | None,
        intents: _LazyIntents,
    ) -> Any:
        arguments = [
            self._dependency(token, edge.token, edge.scope, edge.lazy, scope, intents)
            for edge in record.dependencies
        ]
        logger.debug("Constructing %s for %r", record.constructor.__qualname__, token_name(token))
        instance = record.constructor(*arguments)
        for point in record.injection_points:
            self._inject(instance, token, point, scope, intents)
        return instance

    def _dependency(
        self,
        dependent: Token,
        token: Token,
        edge_scope: ScopeId | None,
        lazy: bool,
        scope: ScopeId | None,
        intents: _LazyIntents,
    ) -> Any:
        target = scope if edge_scope is None else edge_scope
        if lazy:
            self._note_lazy_intent(token, target, intents)
            return LazyReference(self, token, target)

        value = self._resolve(token, force_new=False, scope=target)
        if not value:
            raise DependencyResolutionError(dependent, token, target, value)
        return value

    def _inject(
        self,
        instance: Any,
        dependent: Token,
        point: InjectionPoint,
        scope: ScopeId | None,
        intents: _LazyIntents,
    ) -> None:
        value = self._dependency(dependent, point.token, point.scope, point.lazy, scope, intents)
        if point.lazy:
            vars(instance)[lazy_attribute_name(point.name)] = value
            logger.debug("Installed lazy %r on %r", point.name, token_name(dependent))
        else:
            vars(instance)[point.name] = value

    def _note_lazy_intent(self, token: Token, scope: ScopeId | None, intents: _LazyIntents) -> None:
        if scope not in self._scopes:
            return
        context = self._scopes.get(scope)
        if token not in context.in_progress:
            context.mark(token, lazy=True)
            intents.append((context, token))

    def __repr__(self) -> str:
        sizes = ", ".join(repr(context) for context in self._scopes.contexts())
        return f"Container({sizes})"
