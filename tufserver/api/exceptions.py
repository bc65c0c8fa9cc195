# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""
Define exceptions raised by the reposerver and director clients.
The names chosen for Exception classes should end in 'Error' except where
there is a good reason not to, and provide that reason in those cases.
"""


#### Repository errors ####


class RepositoryError(Exception):
    """An error with a repository's state, such as a missing role.

    It covers all exceptions that come from the server side when looking
    from the perspective of users of the clients.
    """


class RoleNotFoundError(RepositoryError):
    """The server does not have the requested role.

    Args:
        description: Error description sent by the server.
    """

    def __init__(self, description: str):
        super().__init__(f"role not found: {description}")
        self.description = description


class RoleChecksumNotValidError(RepositoryError):
    """The targets role was pushed on top of an outdated version."""

    def __init__(self) -> None:
        super().__init__(
            "could not overwrite targets, trying to update an older version "
            "of role. Did you run `targets pull` ?"
        )


class SerializationError(RepositoryError):
    """Error during serialization."""


class DeserializationError(RepositoryError):
    """Error during deserialization."""


#### Transport errors ####


class TransportError(Exception):
    """An error occurred while sending a request or receiving a response."""


class SlowRetrievalError(TransportError):
    """Indicate that the server took an unreasonably long time to answer."""


class HttpError(TransportError):
    """
    Raised for HTTP error responses that have no more specific mapping.

    Args:
        status_code: The HTTP status code
        body: The raw response body
    """

    def __init__(self, status_code: int, body: bytes):
        super().__init__(
            f"Unexpected response from server: {status_code} "
            f"{body.decode('utf-8', errors='replace')}"
        )
        self.status_code = status_code
        self.body = body
