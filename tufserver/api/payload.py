# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Signed role metadata as exchanged with reposerver and director.

A ``SignedPayload`` represents a single signed metadata document: a list of
signatures and a ``signed`` attribute that is one of the role classes
(``RootRole`` or ``TargetsRole``). ``SignedPayload`` can be type
constrained, e.g. ``SignedPayload[RootRole]``, so that static type checkers
know the type of the ``signed`` attribute.

The clients only move these documents between the server and the caller:
role fields that are not needed for that are kept verbatim in
``unrecognized_fields`` so that a document survives a pull and push
unchanged.
"""

import abc
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar

from securesystemslib.formats import encode_canonical
from securesystemslib.signer import Signature

from tufserver.api.exceptions import DeserializationError, SerializationError

logger = logging.getLogger(__name__)

_EXPIRES_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# second precision part, optional fraction, UTC designator
_EXPIRES_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.\d+)?(?:Z|\+00:00)"
)


def _parse_expires(expires_text: str) -> datetime:
    """Parse an expiry date, ignoring fractional seconds.

    Raises:
        ValueError: ``expires_text`` is not an ISO 8601 UTC timestamp.
    """
    match = _EXPIRES_RE.fullmatch(expires_text)
    if match is None:
        raise ValueError(f"Failed to parse expires {expires_text}")

    return datetime.strptime(match.group(1), "%Y-%m-%dT%H:%M:%S").replace(
        tzinfo=timezone.utc
    )


class Role(metaclass=abc.ABCMeta):
    """A base class for the signed part of role metadata.

    *All parameters named below are not just constructor arguments but also
    instance attributes.*

    Args:
        version: Metadata version number.
        expires: Metadata expiry date in UTC timezone.
        unrecognized_fields: Dictionary of all attributes that are not managed
            by this class. They are serialized back unchanged.
        type_name: ``_type`` value as spelled by the server. Servers differ
            in capitalization ("Root" or "root"), the received spelling is
            written back.

    Raises:
        ValueError: Invalid arguments.
    """

    # type is required for static reference without changing the API
    type: ClassVar[str] = "signed"

    def __init__(
        self,
        version: int,
        expires: datetime,
        unrecognized_fields: Optional[Dict[str, Any]] = None,
        type_name: Optional[str] = None,
    ):
        if version <= 0:
            raise ValueError(f"version must be > 0, got {version}")
        self.version = version
        self.expires = expires

        if type_name is None:
            type_name = self.type
        self.type_name = type_name

        if unrecognized_fields is None:
            unrecognized_fields = {}
        self.unrecognized_fields = unrecognized_fields

    @property
    def _type(self) -> str:
        return self.type_name

    @property
    def expires(self) -> datetime:
        """Get the metadata expiry date.

        Fractional seconds sent by the server are not part of the value but
        are kept in the serialized form.
        """
        return self._expires

    @expires.setter
    def expires(self, value: datetime) -> None:
        self._expires = value.replace(microsecond=0)
        if self._expires.tzinfo is None:
            # Naive datetime: just make it UTC
            self._expires = self._expires.replace(tzinfo=timezone.utc)
        elif self._expires.tzinfo != timezone.utc:
            raise ValueError(f"Expected tz UTC, not {self._expires.tzinfo}")
        self._expires_text = self._expires.strftime(_EXPIRES_FORMAT)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return False

        return (
            self.type == other.type
            and self.version == other.version
            and self._expires_text == other._expires_text
            and self.unrecognized_fields == other.unrecognized_fields
        )

    @classmethod
    def from_dict(cls: Type["R"], signed_dict: Dict[str, Any]) -> "R":
        """Create role object from its json/dict representation.

        Raises:
            ValueError, KeyError, TypeError: Invalid arguments.

        Side Effect:
            Destroys the dict passed by reference.
        """
        type_name = signed_dict.pop("_type")
        if not isinstance(type_name, str) or type_name.lower() != cls.type:
            raise ValueError(f"Expected type {cls.type}, got {type_name}")

        version = signed_dict.pop("version")
        if not isinstance(version, int) or isinstance(version, bool):
            raise TypeError(f"Expected version to be an integer, got {version}")

        expires_text = signed_dict.pop("expires")
        if not isinstance(expires_text, str):
            raise TypeError(f"Expected expires str, got {expires_text}")

        # All fields left in the signed dict are unrecognized.
        role = cls(
            version, _parse_expires(expires_text), signed_dict, type_name
        )
        # The signed text is written back as received
        role._expires_text = expires_text
        return role

    def to_dict(self) -> Dict[str, Any]:
        """Return the dict representation of self."""
        return {
            "_type": self._type,
            "version": self.version,
            "expires": self._expires_text,
            **self.unrecognized_fields,
        }

    def is_expired(self, reference_time: Optional[datetime] = None) -> bool:
        """Check metadata expiration against a reference time.

        Args:
            reference_time: Time to check expiration date against. Default is
                current UTC date and time.

        Returns:
            ``True`` if expiration time is less than the reference time.
        """
        if reference_time is None:
            reference_time = datetime.now(timezone.utc)

        return reference_time >= self.expires


class RootRole(Role):
    """Top-level role listing the trusted keys and roles of a repository."""

    type = "root"

    @property
    def keys(self) -> Dict[str, Any]:
        return self.unrecognized_fields.get("keys", {})

    @property
    def roles(self) -> Dict[str, Any]:
        return self.unrecognized_fields.get("roles", {})


class TargetsRole(Role):
    """Role listing target files, also used for delegated roles."""

    type = "targets"

    @property
    def targets(self) -> Dict[str, Any]:
        return self.unrecognized_fields.get("targets", {})

    @property
    def delegations(self) -> Optional[Dict[str, Any]]:
        return self.unrecognized_fields.get("delegations")


R = TypeVar("R", bound=Role)
T = TypeVar("T", RootRole, TargetsRole)


class SignedPayload(Generic[T]):
    """A container for signed role metadata.

    ``SignedPayload[T]`` is a generic container type where T is either
    ``RootRole`` or ``TargetsRole``::

        root = SignedPayload.from_bytes(RootRole, data)
        print(root.signed.version)

    Args:
        signed: Role metadata payload.
        signatures: List of ``Signature`` objects over the canonical
            representation of ``signed``, in the order received.
        unrecognized_fields: Dictionary of envelope attributes that are not
            managed by this class.
    """

    def __init__(
        self,
        signed: T,
        signatures: Optional[List[Signature]] = None,
        unrecognized_fields: Optional[Dict[str, Any]] = None,
    ):
        self.signed: T = signed
        self.signatures = signatures if signatures is not None else []
        if unrecognized_fields is None:
            unrecognized_fields = {}

        self.unrecognized_fields = unrecognized_fields

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignedPayload):
            return False

        return (
            self.signatures == other.signatures
            and self.signed == other.signed
            and self.unrecognized_fields == other.unrecognized_fields
        )

    def __repr__(self) -> str:
        return (
            f"SignedPayload({self.signed.type} v{self.signed.version}, "
            f"{len(self.signatures)} signature(s))"
        )

    @property
    def signed_bytes(self) -> bytes:
        """Canonical json byte representation of ``self.signed``."""
        try:
            return encode_canonical(self.signed.to_dict()).encode("utf-8")
        except Exception as e:
            raise SerializationError("Failed to canonicalize role") from e

    @classmethod
    def from_dict(
        cls, role_cls: Type[T], metadata: Dict[str, Any]
    ) -> "SignedPayload[T]":
        """Create ``SignedPayload`` object from its json/dict representation.

        Args:
            role_cls: Expected class of the ``signed`` part.
            metadata: Signed metadata in dict representation.

        Raises:
            ValueError, KeyError, TypeError: Invalid arguments.

        Side Effect:
            Destroys the metadata dict passed by reference.
        """
        signatures = [
            Signature.from_dict(sig_dict)
            for sig_dict in metadata.pop("signatures")
        ]

        return cls(
            signed=role_cls.from_dict(metadata.pop("signed")),
            signatures=signatures,
            # All fields left in the metadata dict are unrecognized.
            unrecognized_fields=metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the dict representation of self."""
        return {
            "signatures": [sig.to_dict() for sig in self.signatures],
            "signed": self.signed.to_dict(),
            **self.unrecognized_fields,
        }

    @classmethod
    def from_bytes(cls, role_cls: Type[T], data: bytes) -> "SignedPayload[T]":
        """Load signed metadata from utf-8 encoded JSON.

        Raises:
            DeserializationError: The data cannot be deserialized.
        """
        try:
            json_dict = json.loads(data.decode("utf-8"))
            return cls.from_dict(role_cls, json_dict)
        except Exception as e:
            raise DeserializationError(
                f"Failed to deserialize {role_cls.type} metadata"
            ) from e

    def to_bytes(self) -> bytes:
        """Serialize into compact utf-8 encoded JSON.

        Raises:
            SerializationError: The object cannot be serialized.
        """
        try:
            return json.dumps(
                self.to_dict(), separators=(",", ":"), sort_keys=True
            ).encode("utf-8")
        except Exception as e:
            raise SerializationError("Failed to serialize JSON") from e
