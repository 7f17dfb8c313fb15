"""Modules: bundle providers, import other modules and bind across them.

``Bind(to=..., from_=...)`` grafts a dependency onto the importing module's
provider, so ``ServiceY`` receives ``ServiceX`` without declaring it.
"""

from __future__ import annotations

from modwire import Bind, Container, Import, Module, Provide


class ServiceX:
    def value(self) -> str:
        return "X"


class ServiceY:
    def __init__(self, x: ServiceX) -> None:
        self.x = x

    def value(self) -> str:
        return self.x.value() + "Y"


def main() -> None:
    x_module = Module(providers=[Provide("ServiceX", use_class=ServiceX)], name="x")
    y_module = Module(
        providers=[
            Provide("ServiceY", use_class=ServiceY),
            Provide("Greeting", use_factory=lambda: "hello"),
        ],
        imports=[Import(x_module, binds=[Bind(to="ServiceY", from_="ServiceX")])],
        name="y",
    )

    container = Container()
    container.bootstrap(y_module)

    print(f"value={container.resolve('ServiceY').value()}")  # => value=XY
    print(f"greeting={container.resolve('Greeting')}")  # => greeting=hello


if __name__ == "__main__":
    main()
