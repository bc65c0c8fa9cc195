# Copyright 2021, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Provides an interface for network IO abstraction."""

# Imports
import abc
import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from requests.structures import CaseInsensitiveDict

from tufserver.api import exceptions

logger = logging.getLogger(__name__)


# Classes
@dataclass(frozen=True)
class HttpRequest:
    """A request to be sent by a transport."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def with_header(self, name: str, value: str) -> "HttpRequest":
        """Return a copy of the request with header ``name`` set."""
        return replace(self, headers={**self.headers, name: value})

    def with_body(self, body: bytes, content_type: str) -> "HttpRequest":
        """Return a copy of the request carrying ``body``."""
        request = replace(self, body=body)
        return request.with_header("Content-Type", content_type)


@dataclass
class HttpResponse:
    """A response as received by a transport.

    Header lookup is case-insensitive.
    """

    status_code: int
    body: bytes = b""
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class TransportInterface(metaclass=abc.ABCMeta):
    """Defines an interface for abstract HTTP request execution.

    By providing a concrete implementation of the abstract interface,
    users of the clients can plug-in their preferred/customized
    network stack.

    Blocking implementations only need to implement ``_send()``, it is run
    in a worker thread so that the event loop is never blocked. Natively
    asynchronous implementations override ``send()`` instead.
    """

    def _send(self, request: HttpRequest) -> HttpResponse:
        """Send ``request`` and return the response, whatever its status.

        Implementations must not raise for HTTP error statuses: status
        codes are interpreted by the clients.

        Implementations may raise any errors but the ones that are not
        ``TransportErrors`` will be wrapped in a ``TransportError`` by
        ``send()``.

        Args:
            request: The request to send.

        Raises:
            exceptions.SlowRetrievalError: Timeout occurs while waiting for
                the server.

        Returns:
            The received response.
        """
        raise NotImplementedError  # pragma: no cover

    async def send(self, request: HttpRequest) -> HttpResponse:
        """Send ``request`` without blocking the event loop.

        Args:
            request: The request to send.

        Raises:
            exceptions.TransportError: An error occurred while sending the
                request or receiving the response.

        Returns:
            The received response.
        """
        # Ensure that send() only raises TransportErrors, regardless of the
        # transport implementation
        try:
            return await asyncio.to_thread(self._send, request)
        except exceptions.TransportError as e:
            raise e
        except Exception as e:
            raise exceptions.TransportError(
                f"Failed to {request.method} {request.url}"
            ) from e
