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
import threading
import time
from concurrent import futures
from unittest import mock

import pytest

import conduit


class AccountsApi: ...


class TestClientSettings:
    def test_both_auth_suppliers_raises(self) -> None:
        with pytest.raises(conduit.ConfigurationException):
            conduit.ClientSettings(auth_supplier=lambda: "a", parameterized_auth_supplier=lambda _: "b")

    def test_settings_are_immutable(self) -> None:
        settings = conduit.ClientSettings(transport_name="svc")
        with pytest.raises(AttributeError):
            settings.transport_name = "other"  # type: ignore[reportAttributeAccessIssue]

    def test_default_content_serializer_is_json(self) -> None:
        assert isinstance(conduit.ClientSettings().content_serializer, conduit.JsonContentSerializer)

    def test_has_transport_name(self) -> None:
        assert conduit.ClientSettings(transport_name="svc").has_transport_name
        assert not conduit.ClientSettings(transport_name="").has_transport_name
        assert not conduit.ClientSettings().has_transport_name


class TestSettingsResolver:
    def test_static_settings_resolved_immediately(self) -> None:
        settings = conduit.ClientSettings(transport_name="svc")
        resolver = conduit.SettingsResolver(AccountsApi, settings)

        assert resolver.resolved
        assert resolver.peek() is settings

    def test_none_settings_resolved_immediately(self) -> None:
        resolver = conduit.SettingsResolver(AccountsApi, None)

        assert resolver.resolved
        assert resolver.peek() is None

    def test_peek_raises_before_callable_resolved(self) -> None:
        resolver = conduit.SettingsResolver(AccountsApi, lambda _: None)

        assert not resolver.resolved
        with pytest.raises(LookupError):
            resolver.peek()

    def test_invalid_provider_raises(self) -> None:
        with pytest.raises(conduit.ConfigurationException):
            conduit.SettingsResolver(AccountsApi, "svc")  # type: ignore[reportArgumentType]

    def test_provider_returning_wrong_type_raises(self) -> None:
        resolver = conduit.SettingsResolver(AccountsApi, lambda _: "svc")  # type: ignore[reportArgumentType]

        with pytest.raises(conduit.ConfigurationException):
            resolver.resolve(conduit.Registry().build_container())

    def test_provider_invoked_once(self) -> None:
        settings = conduit.ClientSettings(transport_name="svc")
        provider = mock.Mock(return_value=settings)
        resolver = conduit.SettingsResolver(AccountsApi, provider)
        container = conduit.Registry().build_container()

        assert resolver.resolve(container) is settings
        assert resolver.resolve(container) is settings
        provider.assert_called_once_with(container)

    def test_provider_failure_is_not_memoized(self) -> None:
        provider = mock.Mock(side_effect=RuntimeError("boom"))
        resolver = conduit.SettingsResolver(AccountsApi, provider)
        container = conduit.Registry().build_container()

        for _ in range(2):
            with pytest.raises(RuntimeError, match="boom"):
                resolver.resolve(container)

        assert provider.call_count == 2
        assert not resolver.resolved

    def test_reentrant_resolution_raises(self) -> None:
        resolver: conduit.SettingsResolver

        def provider(container: conduit.Container) -> conduit.ClientSettings | None:
            return resolver.resolve(container)

        resolver = conduit.SettingsResolver(AccountsApi, provider)

        with pytest.raises(conduit.ReentrantResolutionException):
            resolver.resolve(conduit.Registry().build_container())

    def test_concurrent_first_resolution_invokes_provider_once(self) -> None:
        calls = 0

        def provider(_: conduit.Container) -> conduit.ClientSettings:
            nonlocal calls
            calls += 1
            time.sleep(0.05)
            return conduit.ClientSettings(transport_name="svc")

        resolver = conduit.SettingsResolver(AccountsApi, provider)
        container = conduit.Registry().build_container()
        barrier = threading.Barrier(20)

        def resolve() -> conduit.ClientSettings | None:
            barrier.wait()
            return resolver.resolve(container)

        with futures.ThreadPoolExecutor(max_workers=20) as pool:
            results = list(pool.map(lambda _: resolve(), range(20)))

        assert calls == 1
        assert all(r is results[0] for r in results)
