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
Extension module adding support for resolving conduit clients in `FastAPI <https://fastapi.tiangolo.com/>`_
request handlers.

----
"""

from __future__ import annotations

__all__ = ["STATE_ATTR", "lifespan", "provide"]

import contextlib
import logging
import typing as t

import fastapi

from conduit import exceptions
from conduit import utils

if t.TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from collections.abc import Callable

    from conduit import container as container_
    from conduit import registry as registry_

LOGGER = logging.getLogger(__name__)

STATE_ATTR: t.Final[str] = "conduit_container"
"""Name of the application state attribute the container is stored under."""


def lifespan(registry: registry_.Registry) -> Callable[[fastapi.FastAPI], t.AsyncContextManager[None]]:
    """
    Create a lifespan handler which builds a container from the given registry when the application starts, and
    closes the container and the registry when it shuts down.

    Args:
        registry: The registry to build the container from.

    Returns:
        The lifespan handler, to pass to :obj:`fastapi.FastAPI`.

    Example:

        .. code-block:: python

            import fastapi
            import conduit

            registry = conduit.Registry()
            conduit.register_client(registry, AccountsApi, conduit.ClientSettings(base_address=...))

            app = fastapi.FastAPI(lifespan=conduit.ext.fastapi.lifespan(registry))
    """
    if registry is None:
        raise exceptions.ConfigurationException("registry must not be None")

    @contextlib.asynccontextmanager
    async def inner(app: fastapi.FastAPI) -> AsyncIterator[None]:
        container = registry.build_container()
        setattr(app.state, STATE_ATTR, container)
        LOGGER.debug("conduit container attached to application")

        try:
            yield
        finally:
            container.close()
            registry.close()
            LOGGER.debug("conduit container closed")

    return inner


def provide(interface: t.Any) -> Callable[[fastapi.Request], t.Any]:
    """
    Create a fastapi dependency resolving the given client interface from the container attached to the
    application by :meth:`~lifespan`. A new client proxy is resolved for every request.

    Args:
        interface: The client interface to resolve.

    Returns:
        The dependency, to use with :obj:`fastapi.Depends`.

    Example:

        .. code-block:: python

            @app.get("/accounts/{account_id}")
            async def get_account(
                account_id: str,
                accounts: t.Annotated[AccountsApi, fastapi.Depends(conduit.ext.fastapi.provide(AccountsApi))],
            ) -> dict[str, t.Any]:
                return accounts.get_account(account_id)
    """

    def dependency(request: fastapi.Request) -> t.Any:
        container: container_.Container | None = getattr(request.app.state, STATE_ATTR, None)
        if container is None:
            raise exceptions.DependencyNotSatisfiableException(
                f"no conduit container is attached to the application to resolve {utils.get_dependency_id(interface)!r}"
            )
        return container.get_required(interface)

    return dependency
