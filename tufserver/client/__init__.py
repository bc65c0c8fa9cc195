# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Reposerver and director client public API."""

from tufserver.client._internal.requests_transport import RequestsTransport
from tufserver.client.config import ClientConfig
from tufserver.client.service_client import ErrorRule, ServiceClient
from tufserver.client.transport import (
    HttpRequest,
    HttpResponse,
    TransportInterface,
)
from tufserver.client.tuf_server_client import (
    DirectorClient,
    ReposerverClient,
    TufServerClient,
)

__all__ = [
    ClientConfig.__name__,
    DirectorClient.__name__,
    ErrorRule.__name__,
    HttpRequest.__name__,
    HttpResponse.__name__,
    ReposerverClient.__name__,
    RequestsTransport.__name__,
    ServiceClient.__name__,
    TransportInterface.__name__,
    TufServerClient.__name__,
]
