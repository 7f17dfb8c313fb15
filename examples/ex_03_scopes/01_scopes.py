"""Scopes: isolated registries with explicit cross-scope edges.

A token registered in a named scope is invisible to the global registry and
to other scopes. ``DependencyEdge(token, scope=...)`` reaches across.
"""

from __future__ import annotations

from modwire import GLOBAL_SCOPE, Container, DependencyEdge, UnregisteredTokenError


class Settings:
    def __init__(self) -> None:
        self.debug = True


class RequestHandler:
    def __init__(self, settings: Settings, user: str) -> None:
        self.settings = settings
        self.user = user


def main() -> None:
    container = Container()
    container.create_scope("request")

    container.register_class(Settings, token="Settings")
    container.register_value("User", "alice", scope="request")
    container.register_class(
        RequestHandler,
        token="Handler",
        scope="request",
        dependencies=[DependencyEdge("Settings", scope=GLOBAL_SCOPE), "User"],
    )

    handler = container.resolve("Handler", scope="request")
    print(f"user={handler.user} debug={handler.settings.debug}")  # => user=alice debug=True

    try:
        container.resolve("User")
    except UnregisteredTokenError as error:
        print(f"error={type(error).__name__}")  # => error=UnregisteredTokenError

    container.reset_registry("request")
    print(f"request_size={container.registry_size('request')}")  # => request_size=0


if __name__ == "__main__":
    main()
