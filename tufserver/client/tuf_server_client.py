# Copyright 2021, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Clients for the reposerver and director metadata services.

Both services serve root metadata and the private keys of root signing
keys, under different URL prefixes. ``TufServerClient`` implements the
shared operations, ``ReposerverClient`` and ``DirectorClient`` add their
own endpoints.

Example::

    client = ReposerverClient("https://reposerver.example.com")
    response = await client.targets()
    # ... modify and re-sign response.targets ...
    await client.push_targets(new_targets, response.checksum)

All operations are coroutines and raise exceptions from
``tufserver.api.exceptions`` on failure. Nothing is retried.
"""

import abc
import logging
from functools import partial
from typing import Optional, Union

from tufserver.api.exceptions import (
    RoleChecksumNotValidError,
    RoleNotFoundError,
)
from tufserver.api.payload import RootRole, SignedPayload, TargetsRole
from tufserver.api.types import (
    DelegatedRoleName,
    ErrorRepresentation,
    KeyId,
    RoleChecksum,
    TargetsResponse,
    TufKeyPair,
)
from tufserver.client._internal.requests_transport import RequestsTransport
from tufserver.client.config import ClientConfig
from tufserver.client.service_client import ErrorRule, ServiceClient, status_is
from tufserver.client.transport import HttpRequest, TransportInterface

logger = logging.getLogger(__name__)

ROLE_CHECKSUM_HEADER = "x-ats-role-checksum"

_ROOT_NOT_FOUND = ErrorRule(
    status_is(404),
    lambda _status, error: RoleNotFoundError(
        error.description if error is not None else "no description"
    ),
)


def _is_checksum_mismatch(
    status: int, error: Optional[ErrorRepresentation]
) -> bool:
    if status == 428:
        return True
    return (
        status == 412
        and error is not None
        and error.code == "role_checksum_mismatch"
    )


_CHECKSUM_NOT_VALID = ErrorRule(
    _is_checksum_mismatch,
    lambda _status, _error: RoleChecksumNotValidError(),
)


class TufServerClient(ServiceClient, metaclass=abc.ABCMeta):
    """Root and key operations shared by reposerver and director.

    Args:
        uri: Base URI of the service, e.g. "https://reposerver.example.com".
        transport: Optional ``TransportInterface`` implementation. If not
            given a ``RequestsTransport`` built from ``config`` is used.
        config: Optional ``ClientConfig``, only used for the default
            transport.
    """

    # path prefix of the service API, relative to uri
    uri_path: str

    def __init__(
        self,
        uri: str,
        transport: Optional[TransportInterface] = None,
        config: Optional[ClientConfig] = None,
    ):
        if transport is None:
            transport = RequestsTransport(config)
        super().__init__(transport)
        self.uri = uri.rstrip("/")

    def api_uri(self, path: str) -> str:
        """Return the URL of ``path`` inside the service API."""
        return self.uri + self.uri_path + path

    async def root(
        self, version: Optional[int] = None
    ) -> SignedPayload[RootRole]:
        """Fetch root metadata, the latest one if ``version`` is None.

        Raises:
            RoleNotFoundError: The server has no such root.
        """
        if version is None:
            filename = "root.json"
        else:
            filename = f"{version}.root.json"

        request = HttpRequest("GET", self.api_uri(filename))
        response = await self.execute(
            request,
            partial(SignedPayload.from_bytes, RootRole),
            [_ROOT_NOT_FOUND],
        )
        return response.body

    async def push_signed_root(
        self, signed_root: SignedPayload[RootRole]
    ) -> None:
        """Upload a new, signed root."""
        logger.debug("Pushing root v%d", signed_root.signed.version)
        request = HttpRequest("POST", self.api_uri("root"))
        await self.execute_json(request, signed_root)

    async def fetch_key_pair(self, key_id: Union[KeyId, str]) -> TufKeyPair:
        """Fetch public and private key of a root signing key."""
        key_id = KeyId(key_id)
        request = HttpRequest("GET", self.api_uri(self._key_path(key_id)))
        response = await self.execute(
            request, partial(TufKeyPair.from_bytes, key_id)
        )
        return response.body

    async def delete_key(self, key_id: Union[KeyId, str]) -> None:
        """Delete the private key of a root signing key from the server."""
        key_id = KeyId(key_id)
        request = HttpRequest("DELETE", self.api_uri(self._key_path(key_id)))
        await self.execute(request)

    @abc.abstractmethod
    def _key_path(self, key_id: KeyId) -> str:
        """Return the API path of the private key ``key_id``."""
        raise NotImplementedError  # pragma: no cover


class ReposerverClient(TufServerClient):
    """Client of the reposerver user repository API."""

    uri_path = "/api/v1/user_repo/"

    def _key_path(self, key_id: KeyId) -> str:
        return f"root/private_keys/{key_id}"

    async def targets(self) -> TargetsResponse:
        """Fetch the targets role and the checksum needed to replace it.

        The checksum is None if the server sent none or an invalid one.
        """
        request = HttpRequest("GET", self.api_uri("targets.json"))
        response = await self.execute(
            request, partial(SignedPayload.from_bytes, TargetsRole)
        )

        raw_checksum = response.headers.get(ROLE_CHECKSUM_HEADER)
        checksum = RoleChecksum.parse(raw_checksum)
        if raw_checksum is not None and checksum is None:
            logger.debug("Ignoring invalid role checksum %r", raw_checksum)

        return TargetsResponse(response.body, checksum)

    async def push_targets(
        self,
        role: SignedPayload[TargetsRole],
        previous_checksum: Optional[RoleChecksum] = None,
    ) -> None:
        """Replace the targets role.

        Args:
            role: New signed targets role.
            previous_checksum: Checksum returned by the ``targets()`` call
                the new role is based on.

        Raises:
            RoleChecksumNotValidError: The role on the server changed since
                ``previous_checksum`` was obtained, or the server requires a
                checksum and none was given.
        """
        request = HttpRequest("PUT", self.api_uri("targets"))
        if previous_checksum is not None:
            request = request.with_header(
                ROLE_CHECKSUM_HEADER, RoleChecksum(previous_checksum)
            )

        await self.execute_json(request, role, rules=[_CHECKSUM_NOT_VALID])

    async def push_delegation(
        self,
        name: Union[DelegatedRoleName, str],
        delegation: SignedPayload[TargetsRole],
    ) -> None:
        """Upload the signed metadata of delegated role ``name``."""
        name = DelegatedRoleName(name)
        request = HttpRequest("PUT", self.api_uri(f"delegations/{name}.json"))
        await self.execute_json(request, delegation)

    async def pull_delegation(
        self, name: Union[DelegatedRoleName, str]
    ) -> SignedPayload[TargetsRole]:
        """Fetch the signed metadata of delegated role ``name``."""
        name = DelegatedRoleName(name)
        request = HttpRequest("GET", self.api_uri(f"delegations/{name}.json"))
        response = await self.execute(
            request, partial(SignedPayload.from_bytes, TargetsRole)
        )
        return response.body


class DirectorClient(TufServerClient):
    """Client of the director admin repository API.

    Assumes the director is reached through the API gateway.
    """

    uri_path = "/api/v1/director/admin/repo/"

    def _key_path(self, key_id: KeyId) -> str:
        return f"private_keys/{key_id}"
