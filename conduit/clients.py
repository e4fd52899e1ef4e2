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

__all__ = [
    "BINDING",
    "REQUEST_BUILDER",
    "SETTINGS",
    "ClientBuilder",
    "ProxyFactory",
    "TypedClientBinding",
    "register_client",
]

import logging
import threading
import typing as t

from conduit import exceptions
from conduit import handlers
from conduit import naming
from conduit import registry as registry_
from conduit import rest
from conduit import settings as settings_
from conduit import transports
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import Callable

    import httpx
    import typing_extensions as t_ex

    from conduit import container as container_

T = t.TypeVar("T")
LOGGER = logging.getLogger(__name__)

SETTINGS: t.Final[str] = "settings"
"""Kind of the :obj:`~conduit.registry.ServiceKey` the resolved settings of an interface are registered under."""
REQUEST_BUILDER: t.Final[str] = "request_builder"
"""Kind of the :obj:`~conduit.registry.ServiceKey` the request builder of an interface is registered under."""
BINDING: t.Final[str] = "binding"
"""Kind of the :obj:`~conduit.registry.ServiceKey` the binding of an interface is registered under."""

ProxyFactory: t.TypeAlias = "Callable[[t.Any, httpx.Client, rest.RequestBuilder], t.Any]"
"""Callable producing a client proxy for an interface, given the transport and the request builder."""


class TypedClientBinding:
    """
    The association between a client interface and the means of producing proxies for it. Created once when the
    interface is registered, and used every time the interface is resolved from a container.

    Args:
        interface: The client interface.
        resolver: The resolver for the settings of the interface.
        proxy_factory: Callable producing a proxy given the interface, transport and request builder.
    """

    __slots__ = (
        "_factory",
        "_lock",
        "_name",
        "_pending_client_configurers",
        "interface",
        "proxy_factory",
        "resolver",
    )

    def __init__(
        self, interface: t.Any, resolver: settings_.SettingsResolver, proxy_factory: ProxyFactory
    ) -> None:
        self.interface = interface
        self.resolver = resolver
        self.proxy_factory = proxy_factory

        self._lock = threading.Lock()
        self._name: str | None = None
        self._factory: transports.TransportFactory | None = None
        self._pending_client_configurers: list[Callable[[httpx.Client], None]] = []

        if resolver.resolved:
            self._name = naming.resolve_transport_name(interface, resolver.peek())

    @property
    def name(self) -> str | None:
        """
        The transport name of the interface. Known immediately when the interface was registered with settings
        or without settings, otherwise :obj:`None` until the settings callable has been resolved.
        """
        return self._name

    def add_client_configurer(self, configurer: Callable[[httpx.Client], None]) -> None:
        """
        Add a callable run against every client created for the transport of the interface.

        Args:
            configurer: Callable given the newly created client.

        Returns:
            :obj:`None`
        """
        with self._lock:
            if self._factory is None:
                self._pending_client_configurers.append(configurer)
                return
            factory, name = self._factory, self._name

        assert name is not None
        factory.add_client_configurer(name, configurer)

    def _configure_factory(
        self, name: str, settings: settings_.ClientSettings | None, factory: transports.TransportFactory
    ) -> None:
        with self._lock:
            if self._factory is not None:
                return

            factory.add_handler_configurer(
                name, lambda _: handlers.build_handler_chain(settings, factory.default_transport_factory).transport
            )
            for configurer in self._pending_client_configurers:
                factory.add_client_configurer(name, configurer)
            self._pending_client_configurers.clear()

            self._name = name
            self._factory = factory

    def create(self, container: container_.Container) -> t.Any:
        """
        Create a new proxy for the interface.

        If the settings of the interface give an explicit transport name, the transport is fetched from the
        container's :obj:`~conduit.transports.TransportRegistry`, creating it on first use. Otherwise a new
        transport is requested from the container's :obj:`~conduit.transports.TransportFactory`.

        Args:
            container: The container resolving the interface.

        Returns:
            The new proxy.

        Raises:
            :obj:`~conduit.exceptions.ReentrantResolutionException`: If called from within the settings callable
                of the same interface.
        """
        if self.resolver.resolving_on_this_thread:
            raise exceptions.ReentrantResolutionException(
                f"client {utils.get_dependency_id(self.interface)!r} requested while its settings are being resolved"
            )

        settings = container.get_required(registry_.ServiceKey(SETTINGS, self.interface)).settings
        name = naming.resolve_transport_name(self.interface, settings)
        request_builder = container.get_required(registry_.ServiceKey(REQUEST_BUILDER, self.interface))

        factory = container.get_required(transports.TransportFactory)
        self._configure_factory(name, settings, factory)

        base_address = settings.base_address if settings is not None else None
        if settings is None or not settings.has_transport_name:
            client = factory.create_client(name, container)
            if base_address is not None:
                client.base_url = base_address
            return self.proxy_factory(self.interface, client, request_builder)

        def create_transport() -> httpx.Client:
            created = factory.create_client(name, container)
            if base_address is not None:
                created.base_url = base_address
            return created

        shared = container.get_required(transports.TransportRegistry)
        client = shared.get_or_create(name, create_transport)
        shared.assign_base_address(client, base_address, overwrite=False)

        LOGGER.debug("resolved client %r on shared transport %r", utils.get_dependency_id(self.interface), name)
        return self.proxy_factory(self.interface, client, request_builder)


class ClientBuilder:
    """
    Handle returned when registering a client interface, identified by the resolved transport name of the
    interface. The name is only available once it has been resolved - see :attr:`~ClientBuilder.name`.

    Args:
        registry: The registry the interface was registered with.
        binding: The binding created for the interface.
    """

    __slots__ = ("_binding", "_registry")

    def __init__(self, registry: registry_.Registry, binding: TypedClientBinding) -> None:
        self._registry = registry
        self._binding = binding

    def __repr__(self) -> str:
        return f"ClientBuilder(interface={utils.get_dependency_id(self.interface)!r}, name={self.name!r})"

    @property
    def name(self) -> str | None:
        """
        The transport name of the interface. If the interface was registered with a settings callable this
        is :obj:`None` until the interface is first resolved.
        """
        return self._binding.name

    @property
    def interface(self) -> t.Any:
        """The registered client interface."""
        return self._binding.interface

    @property
    def registry(self) -> registry_.Registry:
        """The registry the interface was registered with."""
        return self._registry

    def configure_client(self, configurer: Callable[[httpx.Client], None]) -> t_ex.Self:
        """
        Add a callable run against every client created for the transport of this interface - for example to
        set default headers. Clients that were already created are not affected.

        Args:
            configurer: Callable given the newly created client.

        Returns:
            The builder, for chained calls.
        """
        if configurer is None:
            raise exceptions.ConfigurationException("configurer must not be None")

        self._binding.add_client_configurer(configurer)
        return self


def register_client(
    registry: registry_.Registry,
    interface: type[T] | t.Any,
    settings: settings_.SettingsProvider = None,
    *,
    proxy_factory: ProxyFactory | None = None,
) -> ClientBuilder:
    """
    Register everything needed to resolve a typed client for the given interface from containers built from the
    given registry.

    If ``settings`` is a callable, it is invoked with the resolving container **once and only once**, the first
    time the interface is resolved - it is not called per request, so it must not capture dependencies that may be
    disposed of before the application exits. Because the transport name may come from those settings, the
    returned builder's :attr:`~ClientBuilder.name` is :obj:`None` until that first resolution; with static
    settings or no settings it is known immediately.

    Interfaces registered with the same explicit ``transport_name`` share a single transport, created by whichever
    of them is resolved first. Its base address is set by that first interface and is not replaced by the others.
    Interfaces with no explicit name each get a transport of their own.

    Args:
        registry: The registry to add the registrations to.
        interface: The client interface.
        settings: Settings, :obj:`None`, or a callable producing settings from the resolving container.
        proxy_factory: Callable producing the proxy for the interface. Defaults to
            :meth:`~conduit.rest.rest_client_for`.

    Returns:
        The builder for the registered client.

    Raises:
        :obj:`~conduit.exceptions.ConfigurationException`: If ``registry`` or ``interface`` is :obj:`None`.

    Example:

        .. code-block:: python

            registry = conduit.Registry()
            conduit.register_client(
                registry,
                AccountsApi,
                conduit.ClientSettings(transport_name="svc", base_address="https://svc.example"),
            )

            with registry.build_container() as container:
                accounts = container.get_required(AccountsApi)
    """
    if registry is None:
        raise exceptions.ConfigurationException("registry must not be None")
    if interface is None:
        raise exceptions.ConfigurationException("interface must not be None")

    resolver = settings_.SettingsResolver(interface, settings)
    binding = TypedClientBinding(interface, resolver, proxy_factory or rest.rest_client_for)

    registry.register_singleton(
        registry_.ServiceKey(SETTINGS, interface),
        lambda c: settings_.SettingsFor(interface, resolver.resolve(c)),
    )
    registry.register_singleton(
        registry_.ServiceKey(REQUEST_BUILDER, interface),
        lambda c: rest.RequestBuilder(interface, c.get_required(registry_.ServiceKey(SETTINGS, interface)).settings),
    )
    registry.register_value(registry_.ServiceKey(BINDING, interface), binding)

    registry.try_register_singleton(
        transports.TransportFactory, transports.TransportFactory(), teardown=transports.TransportFactory.close
    )
    registry.try_register_singleton(
        transports.TransportRegistry, transports.TransportRegistry(), teardown=transports.TransportRegistry.close
    )

    registry.register_transient(interface, binding.create)

    LOGGER.debug("registered client %r with transport name %r", utils.get_dependency_id(interface), binding.name)
    return ClientBuilder(registry, binding)
