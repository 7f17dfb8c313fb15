"""Quickstart: register classes under tokens and resolve the top-level service.

Dependencies are explicit tokens passed to the constructor in declaration
order. Singletons are cached; ``force_new`` builds a one-off instance.
"""

from __future__ import annotations

from modwire import Container, Lifecycle


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    container = Container()
    container.register_class(Database, token="Database")
    container.register_class(UserRepository, token="UserRepository", dependencies=["Database"])
    container.register_class(
        UserService,
        token="UserService",
        lifecycle=Lifecycle.TRANSIENT,
        dependencies=["UserRepository"],
    )

    service = container.resolve("UserService")
    print(f"db_host={service.repository.database.host}")  # => db_host=localhost

    same_repository = service.repository is container.resolve("UserService").repository
    print(f"repository_shared={same_repository}")  # => repository_shared=True

    fresh = container.resolve("Database", force_new=True)
    print(f"force_new_cached={fresh is container.resolve('Database')}")  # => force_new_cached=False


if __name__ == "__main__":
    main()
