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
from __future__ import annotations

__all__ = ["AuthenticatedTransport", "HandlerChain", "ParameterizedAuthenticatedTransport", "build_handler_chain"]

import logging
import typing as t

import httpx

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from conduit import settings as settings_

LOGGER = logging.getLogger(__name__)

DEFAULT_AUTH_SCHEME: t.Final[str] = "Bearer"


class AuthenticatedTransport(httpx.BaseTransport):
    """
    Transport layer attaching a credential to every outgoing request before forwarding it to the inner
    transport. The supplier is called once per request.

    If the request already has an ``Authorization`` header, its scheme is kept and the credential replaces
    the rest of the header value. Otherwise the header is set using the ``Bearer`` scheme.

    Args:
        supplier: Callable returning the credential.
        inner: The transport to forward requests to. Defaults to a new :obj:`httpx.HTTPTransport`.
    """

    def __init__(self, supplier: Callable[[], str], inner: httpx.BaseTransport | None = None) -> None:
        self._supplier = supplier
        self._inner: httpx.BaseTransport = inner if inner is not None else httpx.HTTPTransport()

    @property
    def inner(self) -> httpx.BaseTransport:
        """The transport requests are forwarded to."""
        return self._inner

    def _credential_for(self, request: httpx.Request) -> str:
        return self._supplier()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        credential = self._credential_for(request)

        scheme = DEFAULT_AUTH_SCHEME
        if existing := request.headers.get("Authorization"):
            scheme = existing.split(" ", 1)[0]
        request.headers["Authorization"] = f"{scheme} {credential}"

        return self._inner.handle_request(request)

    def close(self) -> None:
        self._inner.close()


class ParameterizedAuthenticatedTransport(AuthenticatedTransport):
    """
    Variant of :obj:`~AuthenticatedTransport` whose supplier receives the outgoing request, allowing the
    credential to be customised per request - for example to request a token with a specific scope.

    Args:
        supplier: Callable returning the credential for the given request.
        inner: The transport to forward requests to. Defaults to a new :obj:`httpx.HTTPTransport`.
    """

    def __init__(
        self, supplier: Callable[[httpx.Request], str], inner: httpx.BaseTransport | None = None
    ) -> None:
        super().__init__(supplier, inner)  # type: ignore[reportArgumentType]

    def _credential_for(self, request: httpx.Request) -> str:
        return self._supplier(request)  # type: ignore[reportCallIssue]


class HandlerChain:
    """
    The transport layers built for a client interface.

    Args:
        primary: The innermost transport, or :obj:`None` to use the container's default.
        transport: The outermost transport to hand to the client, or :obj:`None` if no layers were configured.
    """

    __slots__ = ("primary", "transport")

    def __init__(self, primary: httpx.BaseTransport | None, transport: httpx.BaseTransport | None) -> None:
        self.primary = primary
        self.transport = transport

    @property
    def is_default(self) -> bool:
        """Whether the chain adds nothing to the container's default transport."""
        return self.transport is None

    def __repr__(self) -> str:
        return f"HandlerChain(primary={self.primary!r}, transport={self.transport!r})"


def build_handler_chain(
    settings: settings_.ClientSettings | None,
    default_transport_factory: Callable[[], httpx.BaseTransport] = httpx.HTTPTransport,
) -> HandlerChain:
    """
    Build the handler chain described by the given settings.

    The innermost transport comes from ``settings.handler_factory`` if one is set. It is then wrapped by
    at most one authentication layer - the single-argument ``auth_supplier`` takes precedence over the
    ``parameterized_auth_supplier``. An authentication layer configured without a handler factory wraps
    a transport created by ``default_transport_factory``.

    Args:
        settings: The settings to build the chain for.
        default_transport_factory: Creates the innermost transport when the settings do not provide one.
            Callers pass the default of the container's :obj:`~conduit.transports.TransportFactory`.

    Returns:
        The built chain.
    """
    if settings is None:
        return HandlerChain(None, None)

    primary: httpx.BaseTransport | None = None
    if settings.handler_factory is not None:
        primary = settings.handler_factory()

    if settings.auth_supplier is None and settings.parameterized_auth_supplier is None:
        return HandlerChain(primary, primary)

    inner = primary if primary is not None else default_transport_factory()
    transport: httpx.BaseTransport
    if settings.auth_supplier is not None:
        LOGGER.debug("wrapping transport with authentication layer")
        transport = AuthenticatedTransport(settings.auth_supplier, inner)
    else:
        assert settings.parameterized_auth_supplier is not None
        LOGGER.debug("wrapping transport with parameterized authentication layer")
        transport = ParameterizedAuthenticatedTransport(settings.parameterized_auth_supplier, inner)

    return HandlerChain(primary, transport)
