# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Validated identifiers and plain data types used by the clients."""

import json
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Pattern, Type, TypeVar

from securesystemslib.signer import SSlibKey

from tufserver.api.exceptions import DeserializationError
from tufserver.api.payload import SignedPayload, TargetsRole

V = TypeVar("V", bound="_ValidatedStr")


class _ValidatedStr(str):
    """A ``str`` that can only be created from a value matching ``pattern``.

    Raises:
        ValueError: The value does not match.
    """

    pattern: ClassVar[Pattern[str]]

    def __new__(cls: Type[V], value: str) -> V:
        if not isinstance(value, str) or not cls.pattern.fullmatch(value):
            raise ValueError(f"{value!r} is not a valid {cls.__name__}")
        return super().__new__(cls, value)

    @classmethod
    def parse(cls: Type[V], value: Optional[str]) -> Optional[V]:
        """Return a validated instance, or None if ``value`` is not valid."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class RoleChecksum(_ValidatedStr):
    """sha256 hex digest the server uses as version token of a role."""

    pattern = re.compile(r"[0-9a-f]{64}")


class KeyId(_ValidatedStr):
    """Identifier of a role signing key."""

    pattern = re.compile(r"[0-9a-f]{64}")


class DelegatedRoleName(_ValidatedStr):
    """Name of a delegated targets role, usable as URL path segment."""

    pattern = re.compile(r"[A-Za-z0-9_-]{1,50}")


@dataclass
class ErrorRepresentation:
    """Error body returned by the servers for non-2xx responses."""

    code: str
    description: str
    cause: Optional[Any] = None
    error_id: Optional[str] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> Optional["ErrorRepresentation"]:
        """Parse an error body, return None if it is not an error object."""
        try:
            error_dict = json.loads(data.decode("utf-8"))
        except ValueError:
            return None

        if not isinstance(error_dict, dict):
            return None
        code = error_dict.get("code")
        if not isinstance(code, str):
            return None

        return cls(
            code=code,
            description=str(error_dict.get("description", "")),
            cause=error_dict.get("cause"),
            error_id=error_dict.get("errorId"),
        )


@dataclass
class TargetsResponse:
    """Targets role as served, with the checksum needed to push it back."""

    targets: SignedPayload[TargetsRole]
    checksum: Optional[RoleChecksum]


# server keytype -> (securesystemslib keytype, signing scheme)
_KEY_SCHEMES = {
    "ED25519": ("ed25519", "ed25519"),
    "RSA": ("rsa", "rsassa-pss-sha256"),
    "ECPRIME256V1": ("ecdsa", "ecdsa-sha2-nistp256"),
}


@dataclass
class TufKeyPair:
    """Key pair of a role signing key held by the server.

    Attributes:
        key_id: Id the pair was fetched with.
        keytype: Key type as named by the server, e.g. "ED25519" or "RSA".
        public: Public key value (hex for ed25519, PEM otherwise).
        private: Private key value.
    """

    key_id: KeyId
    keytype: str
    public: str
    private: str

    @classmethod
    def from_dict(
        cls, key_id: KeyId, key_dict: Dict[str, Any]
    ) -> "TufKeyPair":
        """Create ``TufKeyPair`` from its json/dict representation.

        Raises:
            KeyError, TypeError, ValueError: Invalid arguments.
        """
        pubkey = key_dict["pubkey"]
        privkey = key_dict["privkey"]
        if pubkey["keytype"] != privkey["keytype"]:
            raise ValueError(
                f"Key types differ: {pubkey['keytype']}, {privkey['keytype']}"
            )

        return cls(
            key_id,
            pubkey["keytype"],
            pubkey["keyval"]["public"],
            privkey["keyval"]["private"],
        )

    @classmethod
    def from_bytes(cls, key_id: KeyId, data: bytes) -> "TufKeyPair":
        """Load a key pair from utf-8 encoded JSON.

        Raises:
            DeserializationError: The data cannot be deserialized.
        """
        try:
            return cls.from_dict(key_id, json.loads(data.decode("utf-8")))
        except Exception as e:
            raise DeserializationError(
                f"Failed to deserialize key pair {key_id}"
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Return the dict representation of self."""
        return {
            "pubkey": {
                "keytype": self.keytype,
                "keyval": {"public": self.public},
            },
            "privkey": {
                "keytype": self.keytype,
                "keyval": {"private": self.private},
            },
        }

    def public_key(self) -> SSlibKey:
        """Return the public half as a securesystemslib key.

        Raises:
            ValueError: The key type is not supported.
        """
        try:
            keytype, scheme = _KEY_SCHEMES[self.keytype.upper()]
        except KeyError as e:
            raise ValueError(f"Unsupported key type {self.keytype}") from e

        return SSlibKey(self.key_id, keytype, scheme, {"public": self.public})
