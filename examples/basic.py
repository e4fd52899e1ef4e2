# /// script
# dependencies = [
#   "conduit-clients",
# ]
# ///
import logging
import typing as t

import conduit


class HttpBin(t.Protocol):
    @conduit.get("/get")
    def echo(self, greeting: str | None = None) -> dict[str, t.Any]: ...

    @conduit.get("/bearer")
    def whoami(self) -> dict[str, t.Any]: ...


class HttpBinStatus(t.Protocol):
    @conduit.get("/status/{code}")
    def status(self, code: int) -> None: ...


registry = conduit.Registry()
conduit.register_client(
    registry,
    HttpBin,
    conduit.ClientSettings(
        transport_name="httpbin",
        base_address="https://httpbin.org",
        auth_supplier=lambda: "conduit-testing",
    ),
)
# shares the transport (and therefore the base address) registered for HttpBin
conduit.register_client(registry, HttpBinStatus, conduit.ClientSettings(transport_name="httpbin"))


def main() -> None:
    with registry.build_container() as container:
        httpbin = container.get_required(HttpBin)
        print(httpbin.echo(greeting="hello")["args"])
        print(httpbin.whoami())

        container.get_required(HttpBinStatus).status(204)

    registry.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    main()
