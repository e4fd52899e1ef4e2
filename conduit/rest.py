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
"""
Default proxy generation for client interfaces.

Interfaces are plain classes (or :obj:`typing.Protocol` subclasses) whose methods are marked with one of the route
decorators. Calling a routed method on a generated proxy builds a request from the method's arguments, sends it
through the proxy's client, and converts the response according to the method's return annotation.

.. code-block:: python

    class UsersApi(t.Protocol):
        @conduit.get("/users/{user_id}")
        def get_user(self, user_id: int) -> dict[str, t.Any]: ...

        @conduit.post("/users")
        def create_user(self, body: dict[str, t.Any]) -> httpx.Response: ...

Arguments named in the path template fill the template, an argument named ``body`` is serialized as the request
content, and any other arguments that are not :obj:`None` become query parameters.
"""

from __future__ import annotations

__all__ = ["RequestBuilder", "Route", "delete", "get", "patch", "post", "put", "rest_client_for", "route"]

import functools
import inspect
import logging
import string
import types
import typing as t

import httpx

from conduit import serialization
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Mapping

    from conduit import settings as settings_

T = t.TypeVar("T")
FuncT = t.TypeVar("FuncT", bound="Callable[..., t.Any]")
LOGGER = logging.getLogger(__name__)

_ROUTE_ATTR: t.Final[str] = "__conduit_route__"
_BODY_PARAM: t.Final[str] = "body"


class Route:
    """The HTTP method, path template and static headers of a routed interface method."""

    __slots__ = ("headers", "method", "path", "path_params")

    def __init__(self, method: str, path: str, headers: Mapping[str, str] | None = None) -> None:
        self.method = method.upper()
        self.path = path
        self.headers = dict(headers or {})
        self.path_params = frozenset(f for _, f, _, _ in string.Formatter().parse(path) if f)

    def __repr__(self) -> str:
        return f"Route({self.method!r}, {self.path!r})"


def route(method: str, path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """
    Decorator marking an interface method as sending a request with the given method to the given path.

    Args:
        method: The HTTP method.
        path: The path template, relative to the base address of the client. ``{name}`` placeholders are filled
            with the method argument of the same name.
        headers: Static headers sent with every request. An ``Authorization`` header containing only a scheme
            sets the scheme used by authentication layers.

    Returns:
        The decorator.
    """

    def inner(func: FuncT) -> FuncT:
        setattr(func, _ROUTE_ATTR, Route(method, path, headers))
        return func

    return inner


def get(path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """Shortcut for :meth:`~route` using the ``GET`` method."""
    return route("GET", path, headers=headers)


def post(path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """Shortcut for :meth:`~route` using the ``POST`` method."""
    return route("POST", path, headers=headers)


def put(path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """Shortcut for :meth:`~route` using the ``PUT`` method."""
    return route("PUT", path, headers=headers)


def patch(path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """Shortcut for :meth:`~route` using the ``PATCH`` method."""
    return route("PATCH", path, headers=headers)


def delete(path: str, *, headers: Mapping[str, str] | None = None) -> Callable[[FuncT], FuncT]:
    """Shortcut for :meth:`~route` using the ``DELETE`` method."""
    return route("DELETE", path, headers=headers)


class _RoutedMethod:
    __slots__ = ("name", "return_type", "route", "signature")

    def __init__(self, name: str, func: Callable[..., t.Any], route_: Route) -> None:
        self.name = name
        self.route = route_
        self.signature = inspect.signature(func, eval_str=True)
        self.return_type = self.signature.return_annotation

        if missing := route_.path_params - set(self.signature.parameters):
            raise TypeError(f"path parameters {sorted(missing)} of {name!r} are not method parameters")


class RequestBuilder:
    """
    Translates calls of the routed methods of a client interface into requests, and their responses into
    return values. One of these is built per interface from its resolved settings.

    Args:
        interface: The client interface.
        settings: The resolved settings of the interface, if any.
    """

    __slots__ = ("_interface", "_methods", "_serializer")

    def __init__(self, interface: t.Any, settings: settings_.ClientSettings | None = None) -> None:
        self._interface = interface
        self._serializer: serialization.ContentSerializer = (
            settings.content_serializer if settings is not None else serialization.JsonContentSerializer()
        )

        self._methods: dict[str, _RoutedMethod] = {}
        for name, member in inspect.getmembers(t.get_origin(interface) or interface, inspect.isfunction):
            if (route_ := getattr(member, _ROUTE_ATTR, None)) is not None:
                self._methods[name] = _RoutedMethod(name, member, route_)

        LOGGER.debug(
            "built request builder for %r with %s routed methods",
            utils.get_dependency_id(interface),
            len(self._methods),
        )

    @property
    def interface(self) -> t.Any:
        """The client interface this builder is for."""
        return self._interface

    @property
    def serializer(self) -> serialization.ContentSerializer:
        """The serializer used for request and response bodies."""
        return self._serializer

    @property
    def method_names(self) -> frozenset[str]:
        """The names of the routed methods of the interface."""
        return frozenset(self._methods)

    def build_request(
        self, client: httpx.Client, method_name: str, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]
    ) -> httpx.Request:
        """
        Build the request for a call of a routed method.

        Args:
            client: The client the request will be sent with.
            method_name: The name of the called method.
            args: The positional arguments of the call, excluding ``self``.
            kwargs: The keyword arguments of the call.

        Returns:
            The built request.
        """
        method = self._methods[method_name]
        bound = method.signature.bind(None, *args, **kwargs)
        bound.apply_defaults()

        arguments = dict(bound.arguments)
        arguments.pop(next(iter(method.signature.parameters)), None)

        path = method.route.path.format_map({name: arguments.pop(name) for name in method.route.path_params})
        headers = dict(method.route.headers)

        content: bytes | None = None
        if _BODY_PARAM in arguments and (body := arguments.pop(_BODY_PARAM)) is not None:
            content = self._serializer.serialize(body)
            headers.setdefault("Content-Type", self._serializer.media_type)

        params = {name: value for name, value in arguments.items() if value is not None}
        return client.build_request(method.route.method, path, params=params, content=content, headers=headers)

    def process_response(self, method_name: str, response: httpx.Response) -> t.Any:
        """
        Convert the response of a routed method call into its return value.

        Args:
            method_name: The name of the called method.
            response: The received response.

        Returns:
            The response itself if the method is annotated to return :obj:`httpx.Response`, :obj:`None`
            if it is annotated to return :obj:`None`, otherwise the deserialized response content.

        Raises:
            :obj:`httpx.HTTPStatusError`: If the response has an error status and the method does not return
                the raw response.
        """
        return_type = self._methods[method_name].return_type
        if return_type is httpx.Response:
            return response

        response.raise_for_status()
        if return_type is None or return_type is type(None):
            return None
        if return_type is str:
            return response.text
        if return_type is bytes:
            return response.content
        if return_type is inspect.Signature.empty:
            return_type = t.Any
        return self._serializer.deserialize(response.content, return_type)


def _make_proxy_method(name: str) -> Callable[..., t.Any]:
    def method(self: t.Any, *args: t.Any, **kwargs: t.Any) -> t.Any:
        builder: RequestBuilder = self._conduit_request_builder
        request = builder.build_request(self.client, name, args, kwargs)
        LOGGER.debug("sending %s %s", request.method, request.url)
        return builder.process_response(name, self.client.send(request))

    method.__name__ = method.__qualname__ = name
    return method


@functools.cache
def _proxy_class_for(interface: t.Any, method_names: frozenset[str]) -> type[t.Any]:
    def __init__(self: t.Any, client: httpx.Client, request_builder: RequestBuilder) -> None:
        self.client = client
        self._conduit_request_builder = request_builder

    namespace: dict[str, t.Any] = {"__init__": __init__}
    namespace.update({name: _make_proxy_method(name) for name in method_names})

    name = f"{getattr(t.get_origin(interface) or interface, '__name__', 'Client')}Proxy"
    return types.new_class(name, (interface,), exec_body=lambda ns: ns.update(namespace))


def rest_client_for(interface: type[T], client: httpx.Client, request_builder: RequestBuilder) -> T:
    """
    Create a proxy implementing the routed methods of the given interface, sending requests through the
    given client. The client is available as the ``client`` attribute of the returned proxy.

    Args:
        interface: The client interface.
        client: The client to send requests with.
        request_builder: The request builder for the interface.

    Returns:
        The proxy instance.
    """
    return t.cast("T", _proxy_class_for(interface, request_builder.method_names)(client, request_builder))

