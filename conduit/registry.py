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

__all__ = ["Lifetime", "Registration", "Registry", "ServiceKey", "dependency_id_for"]

import enum
import logging
import threading
import typing as t

from conduit import exceptions
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import Callable

    from conduit import container as container_

T = t.TypeVar("T")
LOGGER = logging.getLogger(__name__)


class ServiceKey(t.NamedTuple):
    """
    A type-tagged registration key. Used to register per-interface helper services - such as the
    resolved settings or the request builder for a client interface - alongside the interface itself,
    without needing a distinct type for every interface.

    Example:

        .. code-block:: python

            registry.register_singleton(ServiceKey("settings", SomeApi), lambda c: ...)
            container.get_required(ServiceKey("settings", SomeApi))
    """

    kind: str
    """The kind of helper service this key identifies."""
    interface: t.Any
    """The type the helper service belongs to."""

    @property
    def dependency_id(self) -> str:
        """The dependency id used to store this key in registries and containers."""
        return f"{self.kind}:{utils.get_dependency_id(self.interface)}"


def dependency_id_for(key: t.Any) -> str:
    """
    Get the dependency id for a registration key, which is either a type or a :obj:`~ServiceKey`.

    Args:
        key: The key to get the id for.

    Returns:
        The dependency id for the key.

    Raises:
        :obj:`~conduit.exceptions.ConfigurationException`: If the key is :obj:`None`.
    """
    if key is None:
        raise exceptions.ConfigurationException("dependency key must not be None")
    if isinstance(key, ServiceKey):
        return key.dependency_id
    return utils.get_dependency_id(key)


class Lifetime(enum.Enum):
    """How a registered dependency is created when it is requested from a container."""

    SINGLETON = enum.auto()
    """Created once per container by calling the factory."""
    TRANSIENT = enum.auto()
    """Created by calling the factory every time it is requested."""
    VALUE = enum.auto()
    """A pre-made instance, shared by every container built from the registry."""


class Registration:
    """A single dependency registration. You should never have to create these yourself."""

    __slots__ = ("factory", "lifetime", "teardown", "value")

    def __init__(
        self,
        lifetime: Lifetime,
        *,
        factory: Callable[[container_.Container], t.Any] | None = None,
        value: t.Any = None,
        teardown: Callable[[t.Any], None] | None = None,
    ) -> None:
        self.lifetime = lifetime
        self.factory = factory
        self.value = value
        self.teardown = teardown


class Registry:
    """
    A collection of dependency registrations, from which containers can be built. If the same key is
    registered more than once, the most recent registration is used.

    Factories are called with the :obj:`~conduit.container.Container` that is resolving the dependency, so
    they can request any other dependencies they need from it.
    """

    __slots__ = ("_closed", "_lock", "_registrations")

    def __init__(self) -> None:
        self._registrations: dict[str, Registration] = {}
        self._lock = threading.Lock()
        self._closed = False

    def __contains__(self, key: t.Any) -> bool:
        return dependency_id_for(key) in self._registrations

    def _add(self, key: t.Any, registration: Registration) -> None:
        dependency_id = dependency_id_for(key)
        with self._lock:
            self._registrations[dependency_id] = registration
        LOGGER.debug("registered %s dependency %r", registration.lifetime.name.lower(), dependency_id)

    @staticmethod
    def _check_factory(factory: t.Any) -> None:
        if factory is None:
            raise exceptions.ConfigurationException("dependency factory must not be None")

    def register_singleton(
        self,
        key: t.Any,
        factory: Callable[[container_.Container], T],
        *,
        teardown: Callable[[T], None] | None = None,
    ) -> None:
        """
        Register a dependency created once per container.

        Args:
            key: The type or :obj:`~ServiceKey` to register the dependency under.
            factory: Callable producing the dependency, given the resolving container.
            teardown: Optional callable run against the instance when the container closes.

        Returns:
            :obj:`None`

        Raises:
            :obj:`~conduit.exceptions.ConfigurationException`: If the key or factory is :obj:`None`.
        """
        self._check_factory(factory)
        self._add(key, Registration(Lifetime.SINGLETON, factory=factory, teardown=teardown))

    def register_transient(self, key: t.Any, factory: Callable[[container_.Container], t.Any]) -> None:
        """
        Register a dependency created every time it is requested.

        Args:
            key: The type or :obj:`~ServiceKey` to register the dependency under.
            factory: Callable producing the dependency, given the resolving container.

        Returns:
            :obj:`None`

        Raises:
            :obj:`~conduit.exceptions.ConfigurationException`: If the key or factory is :obj:`None`.
        """
        self._check_factory(factory)
        self._add(key, Registration(Lifetime.TRANSIENT, factory=factory))

    def register_value(self, key: t.Any, value: T, *, teardown: Callable[[T], None] | None = None) -> None:
        """
        Register a pre-made instance. The instance is shared by every container built from this registry, and
        its teardown (if any) is run when the registry is closed.

        Args:
            key: The type or :obj:`~ServiceKey` to register the value under.
            value: The instance to register.
            teardown: Optional callable run against the instance when the registry closes.

        Returns:
            :obj:`None`
        """
        self._add(key, Registration(Lifetime.VALUE, value=value, teardown=teardown))

    def try_register_singleton(self, key: t.Any, value: T, *, teardown: Callable[[T], None] | None = None) -> bool:
        """
        Register a pre-made instance only if nothing is registered under the key yet. The check and the
        registration happen atomically.

        Args:
            key: The type or :obj:`~ServiceKey` to register the value under.
            value: The instance to register.
            teardown: Optional callable run against the instance when the registry closes.

        Returns:
            Whether the value was registered.
        """
        dependency_id = dependency_id_for(key)
        with self._lock:
            if dependency_id in self._registrations:
                return False
            self._registrations[dependency_id] = Registration(Lifetime.VALUE, value=value, teardown=teardown)

        LOGGER.debug("registered value dependency %r", dependency_id)
        return True

    def get(self, key: t.Any) -> Registration | None:
        """
        Get the current registration for the given key.

        Args:
            key: The type or :obj:`~ServiceKey` to look up.

        Returns:
            The registration, or :obj:`None` if the key has not been registered.
        """
        return self._registrations.get(dependency_id_for(key))

    def _get(self, dependency_id: str) -> Registration | None:
        return self._registrations.get(dependency_id)

    def build_container(self) -> container_.Container:
        """
        Create a new container that resolves dependencies from this registry. Registrations made after
        the container is built are still visible to it.

        Returns:
            The new container.
        """
        from conduit import container

        return container.Container(self)

    def close(self) -> None:
        """
        Run the teardown functions of all registered values. Containers built from this registry should be
        closed first. Calling this more than once has no effect.

        Returns:
            :obj:`None`
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            registrations = list(self._registrations.items())

        for dependency_id, registration in reversed(registrations):
            if registration.lifetime is Lifetime.VALUE and registration.teardown is not None:
                LOGGER.debug("tearing down value dependency %r", dependency_id)
                registration.teardown(registration.value)
