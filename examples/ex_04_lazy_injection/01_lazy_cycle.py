"""Lazy injection: break a two-way dependency with ``Inject(..., lazy=True)``.

Eager injection on both sides is a cycle. Making one side lazy defers its
resolution until the attribute is first read.
"""

from __future__ import annotations

from modwire import CircularDependencyError, Container, Inject, Module, service


@service(token="Parent")
class Parent:
    child = Inject("Child")

    def name(self) -> str:
        return "parent"


@service(token="Child")
class Child:
    parent = Inject("Parent", lazy=True)


@service(token="EagerChild")
class EagerChild:
    parent = Inject("EagerParent")


@service(token="EagerParent")
class EagerParent:
    child = Inject("EagerChild")


def main() -> None:
    container = Container()
    container.bootstrap(Module(providers=[Parent, Child, EagerParent, EagerChild]))

    parent = container.resolve("Parent")
    print(f"back_reference={parent.child.parent is parent}")  # => back_reference=True
    print(f"name={parent.child.parent.name()}")  # => name=parent

    try:
        container.resolve("EagerParent")
    except CircularDependencyError as error:
        print(f"chain={' -> '.join(error.chain)}")  # => chain=EagerParent -> EagerChild -> EagerParent


if __name__ == "__main__":
    main()
