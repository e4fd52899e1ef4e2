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
import json
import typing as t

import httpx
import pytest

import conduit


class Account:
    def __init__(self, id: str, name: str) -> None:
        self.id = id
        self.name = name


class AccountsApi(t.Protocol):
    @conduit.get("/accounts/{account_id}")
    def get_account(self, account_id: str) -> Account: ...

    @conduit.get("/accounts")
    def list_accounts(self, status: t.Optional[str] = None, limit: int = 10) -> list[t.Any]: ...

    @conduit.post("/accounts")
    def create_account(self, body: dict[str, t.Any]) -> httpx.Response: ...

    @conduit.delete("/accounts/{account_id}")
    def delete_account(self, account_id: str) -> None: ...

    @conduit.get("/accounts/{account_id}/name")
    def get_name(self, account_id: str) -> str: ...

    def not_routed(self) -> None: ...


class Recorder:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "DELETE":
            return httpx.Response(404)
        if request.url.path.endswith("/name"):
            return httpx.Response(200, text="primary")
        if request.url.path == "/accounts" and request.method == "GET":
            return httpx.Response(200, json=[{"id": "1"}])
        if request.method == "POST":
            return httpx.Response(201, content=request.content)
        return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1], "name": "primary"})


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def api(recorder: Recorder) -> AccountsApi:
    client = httpx.Client(transport=httpx.MockTransport(recorder), base_url="https://api.example")
    return conduit.rest_client_for(AccountsApi, client, conduit.RequestBuilder(AccountsApi))


class TestRoute:
    def test_method_is_uppercased(self) -> None:
        assert conduit.Route("get", "/").method == "GET"

    def test_path_params_are_parsed(self) -> None:
        assert conduit.Route("GET", "/a/{b}/c/{d}").path_params == {"b", "d"}

    def test_unknown_path_param_raises(self) -> None:
        class BrokenApi(t.Protocol):
            @conduit.get("/items/{item_id}")
            def get_item(self, key: str) -> None: ...

        with pytest.raises(TypeError):
            conduit.RequestBuilder(BrokenApi)


class TestRequestBuilder:
    def test_only_routed_methods_are_collected(self) -> None:
        builder = conduit.RequestBuilder(AccountsApi)

        assert "not_routed" not in builder.method_names
        assert "get_account" in builder.method_names

    def test_serializer_taken_from_settings(self) -> None:
        serializer = conduit.JsonContentSerializer(indent=2)
        builder = conduit.RequestBuilder(AccountsApi, conduit.ClientSettings(content_serializer=serializer))

        assert builder.serializer is serializer


class TestRestClient:
    def test_proxy_subclasses_interface(self, api: AccountsApi) -> None:
        assert AccountsApi in type(api).__mro__
        assert type(api).__name__ == "AccountsApiProxy"

    def test_path_params_fill_template(self, api: AccountsApi, recorder: Recorder) -> None:
        account = api.get_account("42")

        assert recorder.requests[0].url == "https://api.example/accounts/42"
        assert isinstance(account, Account)
        assert account.id == "42"

    def test_other_arguments_become_query_params(self, api: AccountsApi, recorder: Recorder) -> None:
        assert api.list_accounts(limit=5) == [{"id": "1"}]
        assert dict(recorder.requests[0].url.params) == {"limit": "5"}

    def test_body_is_serialized(self, api: AccountsApi, recorder: Recorder) -> None:
        response = api.create_account({"name": "primary"})

        assert isinstance(response, httpx.Response)
        assert json.loads(recorder.requests[0].content) == {"name": "primary"}
        assert recorder.requests[0].headers["Content-Type"] == "application/json"

    def test_error_status_raises(self, api: AccountsApi) -> None:
        with pytest.raises(httpx.HTTPStatusError):
            api.delete_account("42")

    def test_str_return_gives_text(self, api: AccountsApi) -> None:
        assert api.get_name("42") == "primary"

    def test_bound_client_is_exposed(self, recorder: Recorder) -> None:
        client = httpx.Client(transport=httpx.MockTransport(recorder))
        api = conduit.rest_client_for(AccountsApi, client, conduit.RequestBuilder(AccountsApi))

        assert api.client is client  # type: ignore[reportAttributeAccessIssue]
