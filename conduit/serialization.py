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

__all__ = ["ContentSerializer", "JsonContentSerializer"]

import json
import typing as t


@t.runtime_checkable
class ContentSerializer(t.Protocol):
    """Protocol for objects converting request and response bodies to and from bytes."""

    @property
    def media_type(self) -> str:
        """The media type of the serialized content, sent as the ``Content-Type`` header."""
        ...

    def serialize(self, value: t.Any) -> bytes:
        """Serialize the given value to bytes."""
        ...

    def deserialize(self, content: bytes, target: t.Any) -> t.Any:
        """Deserialize the given bytes into an object suitable for the ``target`` type annotation."""
        ...


class JsonContentSerializer:
    """
    Default content serializer, using the standard library :mod:`json` module.

    Deserialized content is returned as plain Python objects - if ``target`` is a class that is not a
    builtin container, mappings are passed to it as keyword arguments.

    Args:
        **dumps_kwargs: Additional keyword arguments passed to :func:`json.dumps`.
    """

    __slots__ = ("_dumps_kwargs",)

    def __init__(self, **dumps_kwargs: t.Any) -> None:
        self._dumps_kwargs = dumps_kwargs

    @property
    def media_type(self) -> str:
        return "application/json"

    def serialize(self, value: t.Any) -> bytes:
        return json.dumps(value, **self._dumps_kwargs).encode("utf-8")

    def deserialize(self, content: bytes, target: t.Any) -> t.Any:
        if not content:
            return None

        data = json.loads(content)
        if (
            isinstance(data, dict)
            and isinstance(target, type)
            and t.get_origin(target) is None
            and target not in (dict, object, t.Any)
        ):
            return target(**data)
        return data
