from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from modwire.modules import Module, Provide, ProviderDeclaration
from modwire.providers import ClassProvider, DependencyEdge, ProviderDescriptor, ProviderRecord, ValueProvider
from modwire.tokens import ScopeId, Token, token_name

if TYPE_CHECKING:
    from modwire.container import Container

logger = logging.getLogger(__name__)


class ModuleBootstrapper:
    """Merge a module graph into a container's registries.

    Traversal is depth-first in declaration order: each import is fully
    registered before the importing module's own providers. A module reached
    through several import paths is visited once. Within one run the first
    provider registered for a token in a scope wins; providers registered
    before the run are overwritten.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self._visited: set[Module] = set()
        self._registered: set[tuple[ScopeId | None, Token]] = set()
        self._binds_applied = 0

    def bootstrap(self, module: Module) -> None:
        self._visit(module)
        logger.info(
            "Bootstrapped %r: %d modules, %d providers, %d bind edges",
            module,
            len(self._visited),
            len(self._registered),
            self._binds_applied,
        )

    def _visit(self, module: Module) -> None:
        if module in self._visited:
            return
        self._visited.add(module)

        declared = self._declared_tokens(module)
        grafts: dict[Token, list[DependencyEdge]] = {}
        for item in module.imports:
            for bind in item.binds:
                if bind.to in declared:
                    grafts.setdefault(bind.to, []).append(bind.edge())
                else:
                    logger.debug("Bind target %r is not provided by %r", token_name(bind.to), module)
            self._visit(item.module)

        for provider in module.providers:
            self._register(module, provider, grafts)

    def _declared_tokens(self, module: Module) -> set[Token]:
        return {self._token_of(provider) for provider in module.providers}

    def _token_of(self, provider: ProviderDeclaration) -> Token:
        if isinstance(provider, Provide):
            return provider.token
        return self._container.catalog.get(provider).token

    def _register(
        self,
        module: Module,
        provider: ProviderDeclaration,
        grafts: dict[Token, list[DependencyEdge]],
    ) -> None:
        descriptor: ProviderDescriptor | None = None
        if isinstance(provider, Provide):
            token = provider.token
            if provider.use_class is not None:
                descriptor = self._container.catalog.get(provider.use_class)
        else:
            descriptor = self._container.catalog.get(provider)
            token = descriptor.token

        scope = module.scope
        if scope is None and descriptor is not None:
            scope = descriptor.scope
        scope = self._target_scope(scope)

        key = (scope, token)
        if key in self._registered:
            logger.debug("Skipping duplicate provider for %r in %r", token_name(token), module)
            return
        self._registered.add(key)

        record: ProviderRecord
        if descriptor is not None:
            record = self._container.class_provider_for(descriptor)
            self._graft(token, record, grafts.get(token, ()))
        else:
            if token in grafts:
                logger.debug("Ignoring binds onto value provider %r", token_name(token))
            if provider.use_factory is not None:
                logger.debug("Calling factory for %r", token_name(token))
                record = ValueProvider(provider.use_factory())
            else:
                record = ValueProvider(provider.use_value)

        self._container.register_record(token, record, scope)

    def _graft(self, token: Token, record: ClassProvider, edges: Iterable[DependencyEdge]) -> None:
        for edge in edges:
            if record.add_dependency(edge):
                self._binds_applied += 1
                logger.debug("Bound %r into %r", token_name(edge.token), token_name(token))

    def _target_scope(self, scope: ScopeId | None) -> ScopeId | None:
        if self._container.settings.auto_create_scopes:
            self._container.ensure_scope(scope)
        # Raises ScopeNotFoundError for scopes that were never created.
        return self._container.scope_id_of(scope)
