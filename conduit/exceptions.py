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
    "CircularDependencyException",
    "ConduitException",
    "ConfigurationException",
    "ContainerClosedException",
    "DependencyNotSatisfiableException",
    "ReentrantResolutionException",
]


class ConduitException(Exception):
    """Base class for all exceptions raised by conduit."""


class ConfigurationException(ConduitException):
    """
    Exception raised when a client registration or its settings are invalid. This is raised
    immediately when the registration is made, or when the invalid settings object is created.
    """


class DependencyNotSatisfiableException(ConduitException):
    """Exception raised when a required dependency is not registered with the container."""


class CircularDependencyException(ConduitException):
    """Exception raised when a singleton factory requires the dependency it is creating."""


class ReentrantResolutionException(ConduitException):
    """
    Exception raised when a settings provider attempts to resolve the settings it is itself
    in the middle of producing.
    """


class ContainerClosedException(ConduitException):
    """Exception raised when attempting to use a container that has already been closed."""
