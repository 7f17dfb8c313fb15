from modwire.catalog import DescriptorCatalog, default_catalog
from modwire.container import Container
from modwire.exceptions import (
    CircularDependencyError,
    DependencyResolutionError,
    InvalidRegistrationError,
    ModwireError,
    ScopeAlreadyExistsError,
    ScopeNotFoundError,
    UnregisteredTokenError,
)
from modwire.injection import Inject, LazyReference
from modwire.lock_mode import LockMode
from modwire.modules import Bind, Import, Module, Provide
from modwire.providers import DependencyEdge, Lifecycle
from modwire.registration_decorators import service
from modwire.settings import ContainerSettings
from modwire.tokens import GLOBAL_SCOPE, UniqueToken

__all__ = [
    "GLOBAL_SCOPE",
    "Bind",
    "CircularDependencyError",
    "Container",
    "ContainerSettings",
    "DependencyEdge",
    "DependencyResolutionError",
    "DescriptorCatalog",
    "Import",
    "Inject",
    "InvalidRegistrationError",
    "LazyReference",
    "Lifecycle",
    "LockMode",
    "Module",
    "ModwireError",
    "Provide",
    "ScopeAlreadyExistsError",
    "ScopeNotFoundError",
    "UniqueToken",
    "UnregisteredTokenError",
    "default_catalog",
    "service",
]
