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
"""Typed HTTP API clients wired into a dependency container, with safe transport sharing by name."""

from conduit.clients import *
from conduit.container import *
from conduit.exceptions import *
from conduit.handlers import *
from conduit.naming import *
from conduit.registry import *
from conduit.rest import *
from conduit.serialization import *
from conduit.settings import *
from conduit.transports import *

__all__ = [
    "BINDING",
    "DEFAULT_TIMEOUT",
    "REQUEST_BUILDER",
    "SETTINGS",
    "AuthenticatedTransport",
    "CircularDependencyException",
    "ClientBuilder",
    "ClientSettings",
    "ConduitException",
    "ConfigurationException",
    "Container",
    "ContainerClosedException",
    "ContentSerializer",
    "DependencyNotSatisfiableException",
    "HandlerChain",
    "JsonContentSerializer",
    "Lifetime",
    "ParameterizedAuthenticatedTransport",
    "ProxyFactory",
    "ReentrantResolutionException",
    "Registration",
    "Registry",
    "RequestBuilder",
    "Route",
    "ServiceKey",
    "SettingsFor",
    "SettingsProvider",
    "SettingsResolver",
    "TransportFactory",
    "TransportRegistry",
    "TypedClientBinding",
    "build_handler_chain",
    "delete",
    "dependency_id_for",
    "get",
    "patch",
    "post",
    "put",
    "register_client",
    "resolve_transport_name",
    "rest_client_for",
    "route",
    "unique_name_for",
]

# Do not change the below field manually. It is updated by CI upon release.
__version__ = "0.1.0"
