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

__all__ = ["ClientSettings", "SettingsFor", "SettingsProvider", "SettingsResolver"]

import dataclasses
import logging
import threading
import typing as t

from conduit import exceptions
from conduit import serialization
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from conduit import container as container_

LOGGER = logging.getLogger(__name__)

_UNRESOLVED: t.Final[t.Any] = utils.Marker("UNRESOLVED")


@dataclasses.dataclass(frozen=True)
class ClientSettings:
    """
    Immutable configuration for a single client interface.

    Raises:
        :obj:`~conduit.exceptions.ConfigurationException`: If both ``auth_supplier`` and
            ``parameterized_auth_supplier`` are set.

    Example:

        .. code-block:: python

            settings = conduit.ClientSettings(
                transport_name="accounts",
                base_address="https://accounts.example",
                auth_supplier=lambda: token_store.current(),
            )
    """

    transport_name: str | None = None
    """
    Name of the transport to use. Client interfaces registered with the same name share a single
    transport. If unset, the interface gets a transport of its own.
    """
    base_address: str | httpx.URL | None = None
    """Base address of the transport. The first interface to create a shared transport sets it."""
    handler_factory: Callable[[], httpx.BaseTransport] | None = None
    """Factory for the innermost transport. If unset, the container's default transport is used."""
    auth_supplier: Callable[[], str] | None = None
    """Called on every request for the credential to attach to it."""
    parameterized_auth_supplier: Callable[[httpx.Request], str] | None = None
    """Called on every request, with the request, for the credential to attach to it."""
    content_serializer: serialization.ContentSerializer = dataclasses.field(
        default_factory=serialization.JsonContentSerializer
    )
    """Serializer used for request and response bodies."""

    def __post_init__(self) -> None:
        if self.auth_supplier is not None and self.parameterized_auth_supplier is not None:
            raise exceptions.ConfigurationException(
                "only one of 'auth_supplier' and 'parameterized_auth_supplier' may be set"
            )

    @property
    def has_transport_name(self) -> bool:
        """Whether an explicit, non-empty transport name is configured."""
        return bool(self.transport_name)


SettingsProvider: t.TypeAlias = "ClientSettings | Callable[[container_.Container], ClientSettings | None] | None"
"""Either settings, a callable producing settings from the resolving container, or :obj:`None`."""


class SettingsFor:
    """
    Holder for the resolved settings of a client interface. One of these is registered with the container
    for every registered interface, under ``ServiceKey("settings", interface)``.
    """

    __slots__ = ("interface", "settings")

    def __init__(self, interface: t.Any, settings: ClientSettings | None) -> None:
        self.interface = interface
        self.settings = settings

    def __repr__(self) -> str:
        return f"SettingsFor({utils.get_dependency_id(self.interface)!r}, {self.settings!r})"


class SettingsResolver:
    """
    Memoizing wrapper resolving the settings of a client interface.

    If the provider is a callable it is invoked with the resolving container **once and only once**
    for the lifetime of the registration - it is not called per request, so it must not capture resources
    that are disposed of before the application exits. Concurrent first resolutions are serialized so that
    exactly one of them runs the provider.

    If the provider raises, the exception propagates unchanged and nothing is memoized, so the next
    resolution invokes the provider again.

    Args:
        interface: The client interface the settings belong to.
        provider: Settings, :obj:`None`, or a callable producing settings from the resolving container.
    """

    __slots__ = ("_interface", "_lock", "_provider", "_resolving", "_result")

    def __init__(self, interface: t.Any, provider: SettingsProvider) -> None:
        self._interface = interface
        self._lock = threading.Lock()
        self._resolving: int | None = None

        self._provider: Callable[[container_.Container], ClientSettings | None] | None = None
        self._result: t.Any = _UNRESOLVED
        if provider is None or isinstance(provider, ClientSettings):
            self._result = provider
        elif callable(provider):
            self._provider = provider
        else:
            raise exceptions.ConfigurationException(
                f"settings must be ClientSettings, a callable or None - got {type(provider).__name__!r}"
            )

    @property
    def resolved(self) -> bool:
        """Whether the settings have been resolved."""
        return self._result is not _UNRESOLVED

    @property
    def resolving_on_this_thread(self) -> bool:
        """Whether the provider is currently running on the calling thread."""
        return self._resolving == threading.get_ident()

    def peek(self) -> ClientSettings | None:
        """
        Get the settings if they have already been resolved, without invoking the provider.

        Returns:
            The resolved settings.

        Raises:
            :obj:`LookupError`: If the settings have not been resolved yet.
        """
        if self._result is _UNRESOLVED:
            raise LookupError("settings have not been resolved yet")
        return t.cast("ClientSettings | None", self._result)

    def resolve(self, container: container_.Container) -> ClientSettings | None:
        """
        Resolve the settings, invoking the provider if this is the first successful resolution.

        Args:
            container: The container to pass to the provider.

        Returns:
            The resolved settings, or :obj:`None` if no settings were supplied.

        Raises:
            :obj:`~conduit.exceptions.ReentrantResolutionException`: If called from within the provider itself.
            :obj:`~conduit.exceptions.ConfigurationException`: If the provider returns something other than
                :obj:`~ClientSettings` or :obj:`None`.
        """
        if self._result is not _UNRESOLVED:
            return t.cast("ClientSettings | None", self._result)

        # the lock is not reentrant
        if self.resolving_on_this_thread:
            raise exceptions.ReentrantResolutionException(
                f"settings for {utils.get_dependency_id(self._interface)!r} requested while being resolved"
            )

        with self._lock:
            if self._result is not _UNRESOLVED:
                return t.cast("ClientSettings | None", self._result)

            assert self._provider is not None
            self._resolving = threading.get_ident()
            try:
                settings = self._provider(container)
            finally:
                self._resolving = None

            if settings is not None and not isinstance(settings, ClientSettings):
                raise exceptions.ConfigurationException(
                    f"settings provider returned {type(settings).__name__!r}, expected ClientSettings or None"
                )

            self._result = settings

        LOGGER.debug("resolved settings for %r", utils.get_dependency_id(self._interface))
        return settings
