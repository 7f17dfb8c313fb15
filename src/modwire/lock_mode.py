from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for registry mutation and resolution.

    The resolver has no suspension points, so one re-entrant lock per container
    is enough to keep the in-progress tracker and singleton caches consistent
    when several threads resolve against the same container.
    """

    THREAD = "thread"
    """Guard registries, caches and trackers with a ``threading.RLock``."""

    NONE = "none"
    """Disable locking. Use only with single-threaded or cooperative callers."""
