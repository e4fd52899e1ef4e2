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

__all__ = ["resolve_transport_name", "unique_name_for"]

import typing as t

from conduit import utils

if t.TYPE_CHECKING:
    from conduit import settings as settings_


def unique_name_for(interface: t.Any) -> str:
    """
    Derive a transport name from the full identity of a client interface. The derivation is a pure function
    of the interface type: the same type always produces the same name, and distinct types - including
    distinct parameterizations of the same generic, such as ``Api[User]`` and ``Api[Role]`` - never
    produce the same name.

    Args:
        interface: The client interface type.

    Returns:
        The derived transport name.
    """
    return f"conduit:{utils.get_dependency_id(interface)}"


def resolve_transport_name(interface: t.Any, settings: settings_.ClientSettings | None) -> str:
    """
    Resolve the transport name a client interface uses.

    Args:
        interface: The client interface type.
        settings: The resolved settings of the interface, if any.

    Returns:
        The explicit transport name from the settings if it is non-empty, otherwise the name derived
        from the interface type using :meth:`~unique_name_for`.
    """
    if settings is not None and settings.transport_name:
        return settings.transport_name
    return unique_name_for(interface)
