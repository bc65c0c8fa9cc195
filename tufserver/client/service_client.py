# Copyright 2021, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Base class for clients of JSON-over-HTTP services.

``ServiceClient.execute()`` sends a request and either decodes the body of
a successful response or turns the failed response into an exception.
Callers can map specific failures to their own exceptions with an ordered
sequence of ``ErrorRule`` objects::

    rules = [
        ErrorRule(
            status_is(404),
            lambda status, error: RoleNotFoundError(error.description),
        )
    ]
    response = await client.execute(request, decode, rules)

The first rule whose predicate accepts the response wins. Responses that no
rule accepts raise ``HttpError``. Predicates and handlers receive None
instead of an ``ErrorRepresentation`` when the body is not an error object.
"""

import json
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    Sequence,
    TypeVar,
)

from requests.structures import CaseInsensitiveDict

from tufserver.api.exceptions import (
    DeserializationError,
    HttpError,
    SerializationError,
)
from tufserver.api.types import ErrorRepresentation
from tufserver.client.transport import (
    HttpRequest,
    HttpResponse,
    TransportInterface,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Decoder = Callable[[bytes], T]


@dataclass(frozen=True)
class ErrorRule:
    """Maps a failed response to an exception.

    Attributes:
        predicate: Called with the status code and the parsed error body,
            None if the body is not an error object. Returns True if the
            rule applies.
        handler: Called with the same arguments, returns the exception to
            raise.
    """

    predicate: Callable[[int, Optional[ErrorRepresentation]], bool]
    handler: Callable[[int, Optional[ErrorRepresentation]], Exception]


def status_is(
    *status_codes: int,
) -> Callable[[int, Optional[ErrorRepresentation]], bool]:
    """Return an ``ErrorRule`` predicate matching any of ``status_codes``."""

    def predicate(status: int, _error: Optional[ErrorRepresentation]) -> bool:
        return status in status_codes

    return predicate


@dataclass
class DecodedResponse(Generic[T]):
    """Decoded body along with the response it came from."""

    body: T
    response: HttpResponse

    @property
    def headers(self) -> CaseInsensitiveDict:
        return self.response.headers


class ServiceClient:
    """Sends requests through a transport and interprets the responses.

    Args:
        transport: ``TransportInterface`` implementation used to send
            requests.
    """

    def __init__(self, transport: TransportInterface):
        self._transport = transport

    async def execute(
        self,
        request: HttpRequest,
        decode: Optional[Decoder[T]] = None,
        rules: Sequence[ErrorRule] = (),
    ) -> DecodedResponse[Optional[T]]:
        """Send ``request`` and decode a successful response.

        Args:
            request: Request to send.
            decode: Turns the body of a 2xx response into the result. If
                None the body is ignored and the result is None.
            rules: Ordered rules mapping failed responses to exceptions.

        Raises:
            DeserializationError: The body of a 2xx response could not be
                decoded.
            HttpError: Failed response not matched by any rule.
            Exception: Exception returned by the handler of the first
                matching rule.
            TransportError: The request could not be sent.
        """
        response = await self._transport.send(request)

        if response.ok:
            if decode is None:
                return DecodedResponse(None, response)
            try:
                return DecodedResponse(decode(response.body), response)
            except DeserializationError:
                raise
            except Exception as e:
                raise DeserializationError(
                    f"Failed to decode response of {request.method} "
                    f"{request.url}"
                ) from e

        raise self._failure(request, response, rules)

    async def execute_json(
        self,
        request: HttpRequest,
        payload: Any,
        decode: Optional[Decoder[T]] = None,
        rules: Sequence[ErrorRule] = (),
    ) -> DecodedResponse[Optional[T]]:
        """Send ``payload`` as JSON body of ``request``.

        ``payload`` is either an object with a ``to_bytes()`` method or
        anything ``json.dumps()`` accepts. Otherwise like ``execute()``.

        Raises:
            SerializationError: ``payload`` could not be serialized.
        """
        if hasattr(payload, "to_bytes"):
            body = payload.to_bytes()
        else:
            try:
                body = json.dumps(payload).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise SerializationError("Failed to serialize JSON") from e

        return await self.execute(
            request.with_body(body, "application/json"), decode, rules
        )

    @staticmethod
    def _failure(
        request: HttpRequest,
        response: HttpResponse,
        rules: Sequence[ErrorRule],
    ) -> Exception:
        error = ErrorRepresentation.from_bytes(response.body)

        for rule in rules:
            if rule.predicate(response.status_code, error):
                exc = rule.handler(response.status_code, error)
                logger.debug(
                    "%s %s failed with %d: %s",
                    request.method,
                    request.url,
                    response.status_code,
                    exc,
                )
                return exc

        logger.debug(
            "%s %s failed with unmapped status %d",
            request.method,
            request.url,
            response.status_code,
        )
        return HttpError(response.status_code, response.body)
