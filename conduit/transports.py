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

__all__ = ["DEFAULT_TIMEOUT", "TransportFactory", "TransportRegistry"]

import collections
import logging
import os
import threading
import typing as t

import httpx

from conduit import exceptions

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from conduit import container as container_

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT: t.Final[float] = float(os.environ.get("CONDUIT_DEFAULT_TIMEOUT", "100"))
"""Default timeout, in seconds, of clients created by :obj:`~TransportFactory`."""

HandlerConfigurer: t.TypeAlias = "Callable[[container_.Container], httpx.BaseTransport | None]"
ClientConfigurer: t.TypeAlias = "Callable[[httpx.Client], None]"


class TransportFactory:
    """
    The container's named transport factory. Pools one handler (the transport doing the network calls, plus any
    layers wrapping it) per transport name, and creates new :obj:`httpx.Client` instances over the pooled handler
    on request.

    This pooling is independent of :obj:`~TransportRegistry` - every call to :meth:`~TransportFactory.create_client`
    returns a new client object, even though clients for the same name share a connection pool.

    Args:
        timeout: Timeout of the created clients. Defaults to :obj:`~DEFAULT_TIMEOUT`.
        default_transport_factory: Creates the handler used for names with no configured handler.
    """

    __slots__ = (
        "_client_configurers",
        "_default_transport_factory",
        "_handler_configurers",
        "_building",
        "_handlers",
        "_lock",
        "_name_locks",
        "_timeout",
    )

    def __init__(
        self,
        *,
        timeout: float | httpx.Timeout | None = None,
        default_transport_factory: Callable[[], httpx.BaseTransport] = httpx.HTTPTransport,
    ) -> None:
        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._default_transport_factory = default_transport_factory
        self._handler_configurers: dict[str, list[HandlerConfigurer]] = collections.defaultdict(list)
        self._client_configurers: dict[str, list[ClientConfigurer]] = collections.defaultdict(list)
        self._handlers: dict[str, httpx.BaseTransport] = {}
        self._lock = threading.Lock()
        self._name_locks: dict[str, threading.RLock] = {}
        self._building: set[str] = set()

    @property
    def default_transport_factory(self) -> Callable[[], httpx.BaseTransport]:
        """Creates the handler used for names with no configured handler."""
        return self._default_transport_factory

    def add_handler_configurer(self, name: str, configurer: HandlerConfigurer) -> None:
        """
        Add a callable configuring the handler for the given transport name. Configurers are run in the order they
        were added, the first time the handler for the name is needed. The last configurer returning a transport
        decides the handler - if none do, the default transport is used.

        Args:
            name: The transport name.
            configurer: Callable given the resolving container, returning a transport or :obj:`None`.

        Returns:
            :obj:`None`
        """
        with self._lock:
            self._handler_configurers[name].append(configurer)

    def add_client_configurer(self, name: str, configurer: ClientConfigurer) -> None:
        """
        Add a callable run against every client created for the given transport name.

        Args:
            name: The transport name.
            configurer: Callable given the newly created client.

        Returns:
            :obj:`None`
        """
        with self._lock:
            self._client_configurers[name].append(configurer)

    def handler_for(self, name: str, container: container_.Container) -> httpx.BaseTransport:
        """
        Get the pooled handler for the given transport name, building it if this is the first time it is needed.

        Args:
            name: The transport name.
            container: The container passed to the handler configurers.

        Returns:
            The pooled handler.

        Raises:
            :obj:`~conduit.exceptions.CircularDependencyException`: If a configurer for the name requests the
                handler for the same name.
        """
        if (handler := self._handlers.get(name)) is not None:
            return handler

        with self._lock:
            name_lock = self._name_locks.setdefault(name, threading.RLock())

        # configurers run holding the lock of their own name only
        with name_lock:
            if (handler := self._handlers.get(name)) is not None:
                return handler

            with self._lock:
                if name in self._building:
                    raise exceptions.CircularDependencyException(
                        f"handler for transport {name!r} was requested while it was being built"
                    )
                self._building.add(name)
                configurers = list(self._handler_configurers.get(name, ()))

            try:
                for configurer in configurers:
                    if (configured := configurer(container)) is not None:
                        handler = configured

                if handler is None:
                    handler = self._default_transport_factory()
            finally:
                with self._lock:
                    self._building.discard(name)

            with self._lock:
                self._handlers[name] = handler

        LOGGER.debug("built handler %r for transport %r", type(handler).__name__, name)
        return handler

    def create_client(self, name: str, container: container_.Container) -> httpx.Client:
        """
        Create a new client for the given transport name, backed by the pooled handler for that name.

        Args:
            name: The transport name.
            container: The container passed to the handler configurers.

        Returns:
            The new client.
        """
        client = httpx.Client(transport=self.handler_for(name, container), timeout=self._timeout)
        for configurer in tuple(self._client_configurers.get(name, ())):
            configurer(client)

        LOGGER.debug("created client for transport %r", name)
        return client

    def close(self) -> None:
        """
        Close all pooled handlers.

        Returns:
            :obj:`None`
        """
        with self._lock:
            handlers, self._handlers = list(self._handlers.values()), {}

        for handler in handlers:
            handler.close()


class TransportRegistry:
    """
    Registry of transports shared by name across client interfaces.

    For each name, at most one transport is ever stored, and it is never replaced - the first registrant wins.
    Every interface that resolves to a name through the same registry observes the same transport instance.
    Creation for a name happens under a lock owned by the registry for that name, so concurrent first-time
    lookups of a name create exactly one transport, while creating one transport may look up others.

    Example:

        .. code-block:: python

            transports = TransportRegistry()
            first = transports.get_or_create("svc", lambda: httpx.Client(base_url="https://a.example"))
            second = transports.get_or_create("svc", lambda: httpx.Client(base_url="https://b.example"))
            assert first is second
    """

    __slots__ = ("_creating", "_lock", "_name_locks", "_transports")

    def __init__(self) -> None:
        self._transports: dict[str, httpx.Client] = {}
        self._lock = threading.Lock()
        self._name_locks: dict[str, threading.RLock] = {}
        self._creating: set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._transports

    def __len__(self) -> int:
        return len(self._transports)

    def names(self) -> list[str]:
        """Get the names of all stored transports."""
        return list(self._transports)

    def get(self, name: str) -> httpx.Client | None:
        """
        Get the transport stored for the given name.

        Args:
            name: The transport name.

        Returns:
            The stored transport, or :obj:`None` if there is none.
        """
        return self._transports.get(name)

    def get_or_create(self, name: str, create: Callable[[], httpx.Client]) -> httpx.Client:
        """
        Get the transport stored for the given name, creating and storing it if there is none. ``create`` is
        called at most once per name - if it raises, nothing is stored and the exception propagates.

        Args:
            name: The transport name.
            create: Callable creating the transport.

        Returns:
            The transport stored for the name.

        Raises:
            :obj:`~conduit.exceptions.CircularDependencyException`: If ``create`` requests the transport for the
                same name.
        """
        if (existing := self._transports.get(name)) is not None:
            LOGGER.debug("reusing transport %r", name)
            return existing

        with self._lock:
            name_lock = self._name_locks.setdefault(name, threading.RLock())

        with name_lock:
            if (existing := self._transports.get(name)) is not None:
                LOGGER.debug("reusing transport %r", name)
                return existing

            with self._lock:
                if name in self._creating:
                    raise exceptions.CircularDependencyException(
                        f"transport {name!r} was requested while it was being created"
                    )
                self._creating.add(name)

            try:
                transport = create()
            finally:
                with self._lock:
                    self._creating.discard(name)

            with self._lock:
                self._transports[name] = transport

        LOGGER.debug("registered transport %r", name)
        return transport

    def assign_base_address(
        self, transport: httpx.Client, address: str | httpx.URL | None, *, overwrite: bool = False
    ) -> bool:
        """
        Assign a base address to a transport, if it does not have one yet or ``overwrite`` is requested.

        Args:
            transport: The transport to assign the address to.
            address: The base address. If :obj:`None`, nothing is assigned.
            overwrite: Whether to replace an address that is already set. Defaults to :obj:`False`.

        Returns:
            Whether the address was assigned.
        """
        if address is None:
            return False

        with self._lock:
            if str(transport.base_url) and not overwrite:
                LOGGER.debug("keeping base address %r", str(transport.base_url))
                return False

            transport.base_url = httpx.URL(address)

        LOGGER.debug("assigned base address %r", str(transport.base_url))
        return True

    def close(self) -> None:
        """
        Close all stored transports. They stay registered, so this should only be called on shutdown.

        Returns:
            :obj:`None`
        """
        with self._lock:
            transports = list(self._transports.values())

        for transport in transports:
            transport.close()
