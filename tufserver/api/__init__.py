# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Public API for ``tufserver.api``."""

from .exceptions import (
    DeserializationError,
    HttpError,
    RepositoryError,
    RoleChecksumNotValidError,
    RoleNotFoundError,
    SerializationError,
    SlowRetrievalError,
    TransportError,
)
from .payload import Role, RootRole, SignedPayload, TargetsRole
from .types import (
    DelegatedRoleName,
    ErrorRepresentation,
    KeyId,
    RoleChecksum,
    TargetsResponse,
    TufKeyPair,
)

__all__ = [
    DelegatedRoleName.__name__,
    DeserializationError.__name__,
    ErrorRepresentation.__name__,
    HttpError.__name__,
    KeyId.__name__,
    RepositoryError.__name__,
    Role.__name__,
    RoleChecksum.__name__,
    RoleChecksumNotValidError.__name__,
    RoleNotFoundError.__name__,
    RootRole.__name__,
    SerializationError.__name__,
    SignedPayload.__name__,
    SlowRetrievalError.__name__,
    TargetsResponse.__name__,
    TargetsRole.__name__,
    TransportError.__name__,
    TufKeyPair.__name__,
]
