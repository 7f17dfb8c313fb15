from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from modwire.lock_mode import LockMode
from modwire.providers import Lifecycle


class ContainerSettings(BaseSettings):
    """Container defaults, loaded from ``MODWIRE_*`` environment variables.

    Examples:
        .. code-block:: shell

            MODWIRE_DEFAULT_LIFECYCLE=transient MODWIRE_LOCK_MODE=none python app.py

    """

    model_config = SettingsConfigDict(env_prefix="MODWIRE_", frozen=True)

    default_lifecycle: Lifecycle = Field(
        default=Lifecycle.SINGLETON,
        description="Lifecycle for providers whose descriptor does not name one",
    )
    lock_mode: LockMode = Field(
        default=LockMode.THREAD,
        description="Locking strategy for registries, caches and trackers",
    )
    auto_create_scopes: bool = Field(
        default=True,
        description="Create missing scopes named by bootstrapped modules",
    )
