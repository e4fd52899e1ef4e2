# -*- coding: utf-8 -*-
# Copyright (c) 2026-present conduit contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
from unittest import mock

import httpx
import pytest

import conduit
from conduit import transports


def _ok(_: httpx.Request) -> httpx.Response:
    return httpx.Response(200)


class TestTransportRegistry:
    def test_get_or_create_is_idempotent(self) -> None:
        registry = conduit.TransportRegistry()
        create = mock.Mock(side_effect=httpx.Client)

        first = registry.get_or_create("svc", create)
        second = registry.get_or_create("svc", create)

        assert first is second
        create.assert_called_once_with()

    def test_distinct_names_get_distinct_transports(self) -> None:
        registry = conduit.TransportRegistry()

        assert registry.get_or_create("a", httpx.Client) is not registry.get_or_create("b", httpx.Client)
        assert sorted(registry.names()) == ["a", "b"]
        assert len(registry) == 2

    def test_failed_creation_stores_nothing(self) -> None:
        registry = conduit.TransportRegistry()

        with pytest.raises(RuntimeError):
            registry.get_or_create("svc", mock.Mock(side_effect=RuntimeError("boom")))

        assert "svc" not in registry
        assert registry.get("svc") is None

    def test_assign_base_address_sets_unset_address(self) -> None:
        registry = conduit.TransportRegistry()
        client = httpx.Client()

        assert registry.assign_base_address(client, "https://a.example")
        assert client.base_url.host == "a.example"

    def test_assign_base_address_does_not_overwrite_by_default(self) -> None:
        registry = conduit.TransportRegistry()
        client = httpx.Client(base_url="https://a.example")

        assert not registry.assign_base_address(client, "https://b.example")
        assert client.base_url.host == "a.example"

    def test_assign_base_address_overwrites_when_requested(self) -> None:
        registry = conduit.TransportRegistry()
        client = httpx.Client(base_url="https://a.example")

        assert registry.assign_base_address(client, "https://b.example", overwrite=True)
        assert client.base_url.host == "b.example"

    def test_assign_none_base_address_is_noop(self) -> None:
        registry = conduit.TransportRegistry()
        client = httpx.Client(base_url="https://a.example")

        assert not registry.assign_base_address(client, None, overwrite=True)
        assert client.base_url.host == "a.example"

    def test_create_can_look_up_another_name(self) -> None:
        registry = conduit.TransportRegistry()

        def create() -> httpx.Client:
            registry.get_or_create("b", httpx.Client)
            return httpx.Client()

        registry.get_or_create("a", create)
        assert sorted(registry.names()) == ["a", "b"]

    def test_create_requesting_own_name_raises(self) -> None:
        registry = conduit.TransportRegistry()

        with pytest.raises(conduit.CircularDependencyException):
            registry.get_or_create("a", lambda: registry.get_or_create("a", httpx.Client))

        assert "a" not in registry

    def test_close_closes_stored_transports(self) -> None:
        registry = conduit.TransportRegistry()
        client = registry.get_or_create("svc", httpx.Client)

        registry.close()
        assert client.is_closed


class TestTransportFactory:
    def test_default_timeout_read_from_environment_default(self) -> None:
        assert transports.DEFAULT_TIMEOUT == 100.0

    def test_create_client_returns_new_client_over_pooled_handler(self) -> None:
        factory = conduit.TransportFactory(default_transport_factory=lambda: httpx.MockTransport(_ok))
        container = conduit.Registry().build_container()

        first = factory.create_client("svc", container)
        second = factory.create_client("svc", container)

        assert first is not second
        assert factory.handler_for("svc", container) is factory.handler_for("svc", container)

    def test_created_clients_use_configured_timeout(self) -> None:
        factory = conduit.TransportFactory(timeout=5.0)
        client = factory.create_client("svc", conduit.Registry().build_container())

        assert client.timeout == httpx.Timeout(5.0)

    def test_default_handler_used_without_configurers(self) -> None:
        default = httpx.MockTransport(_ok)
        factory = conduit.TransportFactory(default_transport_factory=lambda: default)

        assert factory.handler_for("svc", conduit.Registry().build_container()) is default

    def test_last_configurer_returning_transport_wins(self) -> None:
        factory = conduit.TransportFactory()
        first, second = httpx.MockTransport(_ok), httpx.MockTransport(_ok)
        factory.add_handler_configurer("svc", lambda _: first)
        factory.add_handler_configurer("svc", lambda _: second)
        factory.add_handler_configurer("svc", lambda _: None)

        assert factory.handler_for("svc", conduit.Registry().build_container()) is second

    def test_configurers_only_apply_to_their_name(self) -> None:
        factory = conduit.TransportFactory()
        configured = httpx.MockTransport(_ok)
        factory.add_handler_configurer("a", lambda _: configured)

        container = conduit.Registry().build_container()
        assert factory.handler_for("a", container) is configured
        assert isinstance(factory.handler_for("b", container), httpx.HTTPTransport)

    def test_client_configurers_applied_to_created_clients(self) -> None:
        factory = conduit.TransportFactory()
        factory.add_client_configurer("svc", lambda c: c.headers.update({"X-Client": "conduit"}))

        client = factory.create_client("svc", conduit.Registry().build_container())
        assert client.headers["X-Client"] == "conduit"

    def test_close_closes_pooled_handlers(self) -> None:
        handler = mock.Mock(spec=httpx.BaseTransport)
        factory = conduit.TransportFactory(default_transport_factory=lambda: handler)
        factory.handler_for("svc", conduit.Registry().build_container())

        factory.close()
        handler.close.assert_called_once_with()

    def test_configurer_can_build_handler_for_another_name(self) -> None:
        factory = conduit.TransportFactory(default_transport_factory=lambda: httpx.MockTransport(_ok))
        container = conduit.Registry().build_container()
        factory.add_handler_configurer(
            "a", lambda c: conduit.AuthenticatedTransport(lambda: "token", factory.handler_for("b", c))
        )

        handler = factory.handler_for("a", container)

        assert isinstance(handler, conduit.AuthenticatedTransport)
        assert handler.inner is factory.handler_for("b", container)

    def test_configurer_requesting_own_name_raises(self) -> None:
        factory = conduit.TransportFactory()
        container = conduit.Registry().build_container()
        factory.add_handler_configurer("a", lambda c: factory.handler_for("a", c))

        with pytest.raises(conduit.CircularDependencyException):
            factory.handler_for("a", container)

    def test_default_transport_factory_is_exposed(self) -> None:
        default_factory = mock.Mock()
        assert conduit.TransportFactory(default_transport_factory=default_factory).default_transport_factory is (
            default_factory
        )
