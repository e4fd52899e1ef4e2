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

__all__ = ["Container"]

import logging
import threading
import typing as t

from conduit import exceptions
from conduit import registry as registry_
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    import typing_extensions as t_ex

T = t.TypeVar("T")
LOGGER = logging.getLogger(__name__)

_NOT_FOUND: t.Final[t.Any] = utils.Marker("NOT_FOUND")


class Container:
    """
    A container resolving dependencies from a :obj:`~conduit.registry.Registry`. Singleton dependencies are
    created at most once per container, transient dependencies on every request, and values are shared
    with every other container built from the same registry.

    Resolution is safe to perform concurrently from multiple threads.

    Args:
        registry: The registry containing the dependency registrations.

    Example:

        .. code-block:: python

            registry = conduit.Registry()
            registry.register_singleton(Greeter, lambda _: Greeter("conduit"))

            with registry.build_container() as container:
                container.get_required(Greeter).greet()
    """

    __slots__ = ("_closed", "_instances", "_key_locks", "_local", "_lock", "_registry", "_teardowns")

    def __init__(self, registry: registry_.Registry) -> None:
        if registry is None:
            raise exceptions.ConfigurationException("registry must not be None")

        self._registry = registry
        self._instances: dict[str, t.Any] = {}
        self._teardowns: list[tuple[str, Callable[[t.Any], None], t.Any]] = []
        self._lock = threading.Lock()
        # one lock per singleton key
        self._key_locks: dict[str, threading.RLock] = {}
        self._local = threading.local()
        self._closed = False

    def __enter__(self) -> t_ex.Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def registry(self) -> registry_.Registry:
        """The registry this container resolves dependencies from."""
        return self._registry

    @property
    def closed(self) -> bool:
        """Whether this container has been closed."""
        return self._closed

    def add_value(self, key: t.Any, value: T, *, teardown: Callable[[T], None] | None = None) -> None:
        """
        Add a pre-made instance to this container only. It takes precedence over any registration in the
        registry for the same key.

        Args:
            key: The type or :obj:`~conduit.registry.ServiceKey` to store the value under.
            value: The instance to store.
            teardown: Optional callable run against the instance when this container closes.

        Returns:
            :obj:`None`
        """
        self._check_open()

        dependency_id = registry_.dependency_id_for(key)
        with self._lock:
            self._instances[dependency_id] = value
            if teardown is not None:
                self._teardowns.append((dependency_id, teardown, value))

    def get_required(self, key: type[T] | t.Any) -> T:
        """
        Get the dependency registered under the given key.

        Args:
            key: The type or :obj:`~conduit.registry.ServiceKey` to resolve.

        Returns:
            The resolved dependency.

        Raises:
            :obj:`~conduit.exceptions.DependencyNotSatisfiableException`: If nothing is registered under the key.
            :obj:`~conduit.exceptions.ContainerClosedException`: If the container has been closed.
        """
        dependency_id = registry_.dependency_id_for(key)
        if (found := self._get(dependency_id)) is _NOT_FOUND:
            raise exceptions.DependencyNotSatisfiableException(f"no dependency registered for {dependency_id!r}")
        return t.cast("T", found)

    def get_optional(self, key: type[T] | t.Any) -> T | None:
        """
        Get the dependency registered under the given key, or :obj:`None` if there is no such dependency.

        Args:
            key: The type or :obj:`~conduit.registry.ServiceKey` to resolve.

        Returns:
            The resolved dependency, or :obj:`None`.

        Raises:
            :obj:`~conduit.exceptions.ContainerClosedException`: If the container has been closed.
        """
        if (found := self._get(registry_.dependency_id_for(key))) is _NOT_FOUND:
            return None
        return t.cast("T", found)

    def _check_open(self) -> None:
        if self._closed:
            raise exceptions.ContainerClosedException("the container has been closed")

    def _get(self, dependency_id: str) -> t.Any:
        self._check_open()

        if (existing := self._instances.get(dependency_id, _NOT_FOUND)) is not _NOT_FOUND:
            return existing

        registration = self._registry._get(dependency_id)
        if registration is None:
            return _NOT_FOUND

        if registration.lifetime is registry_.Lifetime.VALUE:
            return registration.value

        assert registration.factory is not None
        if registration.lifetime is registry_.Lifetime.TRANSIENT:
            LOGGER.debug("creating transient dependency %r", dependency_id)
            return registration.factory(self)

        return self._create_singleton(dependency_id, registration)

    def _creating_on_this_thread(self) -> set[str]:
        if (creating := getattr(self._local, "creating", None)) is None:
            creating = self._local.creating = set()
        return t.cast("set[str]", creating)

    def _create_singleton(self, dependency_id: str, registration: registry_.Registration) -> t.Any:
        with self._lock:
            key_lock = self._key_locks.setdefault(dependency_id, threading.RLock())

        with key_lock:
            if (existing := self._instances.get(dependency_id, _NOT_FOUND)) is not _NOT_FOUND:
                return existing

            creating = self._creating_on_this_thread()
            if dependency_id in creating:
                raise exceptions.CircularDependencyException(
                    f"singleton {dependency_id!r} was requested while it was being created"
                )

            LOGGER.debug("creating singleton dependency %r", dependency_id)
            creating.add(dependency_id)
            try:
                assert registration.factory is not None
                instance = registration.factory(self)
            finally:
                creating.discard(dependency_id)

            with self._lock:
                self._instances[dependency_id] = instance
                if registration.teardown is not None:
                    self._teardowns.append((dependency_id, registration.teardown, instance))
            return instance

    def close(self) -> None:
        """
        Close this container, running the teardown functions of the singletons it created in the reverse order
        to which they were created. Calling this more than once has no effect.

        Returns:
            :obj:`None`
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            teardowns, self._teardowns = self._teardowns, []
            self._instances.clear()

        for dependency_id, teardown, instance in reversed(teardowns):
            LOGGER.debug("tearing down dependency %r", dependency_id)
            teardown(instance)
