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

__all__ = ["Marker", "get_dependency_id"]

import functools
import threading
import typing as t


class Marker:
    """
    Simple class intended to be used in place of when you'd use an object as a marker, in order
    to provide a better repr.

    Args:
        name: The name of the marker.

    Example:

        .. code-block:: python

            >>> FOO = object()
            >>> FOO
            <object object at 0x104cdc5f0>
            >>> BAR = Marker("BAR")
            >>> BAR
            <conduit.Marker: 'BAR'>
    """

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"<conduit.{self.__class__.__name__}: {self._name!r}>"


_CLAIMED_IDS: dict[str, t.Any] = {}
_CLAIM_LOCK = threading.Lock()


def _claim(base_id: str, dependency_type: t.Any) -> str:
    with _CLAIM_LOCK:
        owner = _CLAIMED_IDS.setdefault(base_id, dependency_type)

    if owner is dependency_type:
        return base_id
    # a different type already uses this qualified name (local or dynamically created classes)
    return f"{base_id}@{id(dependency_type):x}"


@functools.cache
def get_dependency_id(dependency_type: t.Any) -> str:
    """
    Get the dependency id of the given type. This is used when storing and retrieving dependencies from registries
    and containers, and as the basis of derived transport names.

    Parameterized generics include the ids of their arguments, so ``Api[User]`` and ``Api[Role]``
    produce different ids. Distinct types sharing a qualified name - such as classes defined inside a
    function that is called more than once - also produce different ids: the first type seen keeps the
    plain qualified name and later ones have their object id appended.

    Args:
        dependency_type: The type to get the dependency id for.

    Returns:
        The dependency id for the given type.
    """
    if (origin := t.get_origin(dependency_type)) is not None:
        args = ",".join(get_dependency_id(arg) for arg in t.get_args(dependency_type))
        return f"{get_dependency_id(origin)}[{args}]"

    if not hasattr(dependency_type, "__module__") or not hasattr(dependency_type, "__name__"):
        # Literal values, ellipsis and other non-type generic arguments
        return repr(dependency_type)

    return _claim(
        f"{dependency_type.__module__}.{getattr(dependency_type, '__qualname__', dependency_type.__name__)}",
        dependency_type,
    )
