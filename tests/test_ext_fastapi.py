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
import typing as t
from unittest import mock

import fastapi
import httpx
import pytest
from fastapi import testclient

import conduit
from conduit.ext import fastapi as conduit_fastapi


class AccountsApi:
    @conduit.get("/accounts/{account_id}")
    def get_account(self, account_id: str) -> dict: ...


def _accounts(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1], "host": request.url.host})


def _build_app(lifespan: t.Any = None) -> fastapi.FastAPI:
    app = fastapi.FastAPI(lifespan=lifespan)

    @app.get("/accounts/{account_id}")
    def get_account(
        account_id: str,
        accounts: t.Annotated[AccountsApi, fastapi.Depends(conduit_fastapi.provide(AccountsApi))],
    ) -> dict[str, t.Any]:
        return accounts.get_account(account_id)

    return app


class TestFastAPIExtension:
    def test_lifespan_with_none_registry_raises(self) -> None:
        with pytest.raises(conduit.ConfigurationException):
            conduit_fastapi.lifespan(None)  # type: ignore[reportArgumentType]

    def test_client_resolved_for_request(self) -> None:
        registry = conduit.Registry()
        conduit.register_client(
            registry,
            AccountsApi,
            conduit.ClientSettings(
                transport_name="accounts",
                base_address="https://accounts.example",
                handler_factory=lambda: httpx.MockTransport(_accounts),
            ),
        )

        with testclient.TestClient(_build_app(conduit_fastapi.lifespan(registry))) as client:
            response = client.get("/accounts/42")

        assert response.status_code == 200
        assert response.json() == {"id": "42", "host": "accounts.example"}

    def test_missing_container_raises(self) -> None:
        client = testclient.TestClient(_build_app())

        with pytest.raises(conduit.DependencyNotSatisfiableException):
            client.get("/accounts/42")

    @pytest.mark.asyncio
    async def test_lifespan_closes_container_and_registry(self) -> None:
        registry = conduit.Registry()
        teardown = mock.Mock()
        registry.register_value(str, "conduit", teardown=teardown)
        app = fastapi.FastAPI()

        async with conduit_fastapi.lifespan(registry)(app):
            container: conduit.Container = getattr(app.state, conduit_fastapi.STATE_ATTR)
            assert container.get_required(str) == "conduit"
            assert not container.closed

        assert container.closed
        teardown.assert_called_once_with("conduit")
