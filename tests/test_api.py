# Copyright 2020, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0
"""Unit tests for tufserver/api"""

import json
import logging
import sys
import unittest
from copy import deepcopy
from datetime import datetime, timezone

from securesystemslib.signer import SSlibKey

from tests import utils
from tufserver.api import exceptions
from tufserver.api.payload import RootRole, SignedPayload, TargetsRole
from tufserver.api.types import (
    DelegatedRoleName,
    ErrorRepresentation,
    KeyId,
    RoleChecksum,
    TufKeyPair,
)

logger = logging.getLogger(__name__)


class TestSignedPayload(unittest.TestCase):
    """Tests for SignedPayload and the role classes."""

    def test_from_dict_keeps_unknown_fields(self) -> None:
        data = utils.signed_role("Root")
        data["extra"] = "envelope field"
        root = SignedPayload.from_dict(RootRole, deepcopy(data))

        self.assertEqual(root.signed.version, 1)
        self.assertEqual(
            root.signed.expires, datetime(2030, 1, 1, tzinfo=timezone.utc)
        )
        self.assertIn(utils.KEY_ID, root.signed.keys)
        self.assertEqual(root.signed.roles["root"]["threshold"], 1)
        self.assertEqual(root.signatures[0].keyid, utils.KEY_ID)
        self.assertEqual(root.unrecognized_fields, {"extra": "envelope field"})

        # method is not a securesystemslib signature field but must survive
        self.assertEqual(root.to_dict(), data)

    def test_type_is_matched_case_insensitively(self) -> None:
        for type_name in ["Root", "root"]:
            data = utils.signed_role(type_name)
            root = SignedPayload.from_dict(RootRole, data)
            self.assertEqual(root.signed.to_dict()["_type"], type_name)

    def test_wrong_role_type(self) -> None:
        with self.assertRaises(ValueError):
            SignedPayload.from_dict(TargetsRole, utils.signed_role("Root"))

    def test_invalid_version(self) -> None:
        data = utils.signed_role("Targets")
        data["signed"]["version"] = 0
        with self.assertRaises(ValueError):
            SignedPayload.from_dict(TargetsRole, data)

        data = utils.signed_role("Targets")
        data["signed"]["version"] = "1"
        with self.assertRaises(TypeError):
            SignedPayload.from_dict(TargetsRole, data)

    def test_from_bytes(self) -> None:
        targets = SignedPayload.from_bytes(
            TargetsRole, utils.json_bytes(utils.signed_role("Targets"))
        )
        self.assertIn("firmware.bin", targets.signed.targets)
        self.assertIsNone(targets.signed.delegations)

        # to_bytes output is loaded back to the same object
        self.assertEqual(
            SignedPayload.from_bytes(TargetsRole, targets.to_bytes()), targets
        )

    def test_from_bytes_invalid_data(self) -> None:
        for data in [b"not json", b"[]", b'{"signatures": []}']:
            with self.assertRaises(exceptions.DeserializationError):
                SignedPayload.from_bytes(RootRole, data)

    def test_signed_bytes_are_canonical(self) -> None:
        root = SignedPayload.from_dict(RootRole, utils.signed_role("Root"))
        signed_bytes = root.signed_bytes

        self.assertNotIn(b" ", signed_bytes)
        self.assertTrue(signed_bytes.startswith(b'{"_type":"Root"'))
        self.assertEqual(json.loads(signed_bytes), root.signed.to_dict())

    def test_expires_text_is_kept(self) -> None:
        for expires in [
            "2030-01-01T00:00:00.123Z",
            "2030-01-01T00:00:00.123456789Z",
            "2030-01-01T00:00:00+00:00",
        ]:
            with self.subTest(expires=expires):
                data = utils.signed_role("Targets")
                data["signed"]["expires"] = expires
                targets = SignedPayload.from_dict(TargetsRole, deepcopy(data))

                self.assertEqual(
                    targets.signed.expires,
                    datetime(2030, 1, 1, tzinfo=timezone.utc),
                )
                self.assertEqual(targets.to_dict(), data)
                self.assertIn(expires.encode("utf-8"), targets.signed_bytes)

    def test_expires_setter_reformats(self) -> None:
        data = utils.signed_role("Targets")
        data["signed"]["expires"] = "2030-01-01T00:00:00.5Z"
        targets = SignedPayload.from_dict(TargetsRole, data)

        targets.signed.expires = datetime(2031, 2, 3, 4, 5, 6, 789)
        self.assertEqual(
            targets.signed.to_dict()["expires"], "2031-02-03T04:05:06Z"
        )

    def test_invalid_expires(self) -> None:
        for expires in ["2030-01-01", "2030-01-01T00:00:00+02:00", 1893456000]:
            with self.subTest(expires=expires):
                data = utils.signed_role("Root")
                data["signed"]["expires"] = expires
                with self.assertRaises(exceptions.DeserializationError):
                    SignedPayload.from_bytes(RootRole, utils.json_bytes(data))

    def test_is_expired(self) -> None:
        root = SignedPayload.from_dict(RootRole, utils.signed_role("Root"))
        self.assertFalse(
            root.signed.is_expired(datetime(2029, 1, 1, tzinfo=timezone.utc))
        )
        self.assertTrue(
            root.signed.is_expired(datetime(2030, 1, 1, tzinfo=timezone.utc))
        )


class TestTypes(unittest.TestCase):
    """Tests for validated strings and plain data types."""

    def test_role_checksum(self) -> None:
        self.assertEqual(RoleChecksum(utils.CHECKSUM), utils.CHECKSUM)
        self.assertEqual(RoleChecksum.parse(utils.CHECKSUM), utils.CHECKSUM)

        invalid = [
            "",
            "abc",
            utils.CHECKSUM.upper(),
            utils.CHECKSUM + "0",
            utils.CHECKSUM[:-1] + "g",
        ]
        for value in invalid:
            with self.subTest(value=value):
                self.assertIsNone(RoleChecksum.parse(value))
                with self.assertRaises(ValueError):
                    RoleChecksum(value)

        self.assertIsNone(RoleChecksum.parse(None))

    def test_key_id(self) -> None:
        self.assertIsInstance(KeyId(utils.KEY_ID), str)
        with self.assertRaises(ValueError):
            KeyId("../../targets")

    def test_delegated_role_name(self) -> None:
        for name in ["a", "my-role_2", "x" * 50]:
            self.assertEqual(DelegatedRoleName(name), name)
        for name in ["", "x" * 51, "a/b", "role.json", "röle"]:
            with self.subTest(name=name), self.assertRaises(ValueError):
                DelegatedRoleName(name)

    def test_error_representation(self) -> None:
        error = ErrorRepresentation.from_bytes(
            utils.json_bytes(
                {
                    "code": "missing_entity",
                    "description": "root.json not found",
                    "errorId": "f0a3",
                }
            )
        )
        self.assertEqual(error.code, "missing_entity")
        self.assertEqual(error.description, "root.json not found")
        self.assertEqual(error.error_id, "f0a3")
        self.assertIsNone(error.cause)

        for body in [b"", b"<html>", b"[1]", b'{"description": "no code"}']:
            self.assertIsNone(ErrorRepresentation.from_bytes(body))

    def test_key_pair(self) -> None:
        key_dict = {
            "pubkey": {"keytype": "ED25519", "keyval": {"public": "ab" * 32}},
            "privkey": {"keytype": "ED25519", "keyval": {"private": "cd" * 32}},
        }
        key_pair = TufKeyPair.from_bytes(
            KeyId(utils.KEY_ID), utils.json_bytes(key_dict)
        )
        self.assertEqual(key_pair.private, "cd" * 32)
        self.assertEqual(key_pair.to_dict(), key_dict)

        public_key = key_pair.public_key()
        self.assertIsInstance(public_key, SSlibKey)
        self.assertEqual(public_key.keyid, utils.KEY_ID)
        self.assertEqual(public_key.keytype, "ed25519")
        self.assertEqual(public_key.scheme, "ed25519")

    def test_key_pair_invalid(self) -> None:
        key_id = KeyId(utils.KEY_ID)
        mismatch = {
            "pubkey": {"keytype": "RSA", "keyval": {"public": "pem"}},
            "privkey": {"keytype": "ED25519", "keyval": {"private": "cd"}},
        }
        for data in [b"{}", utils.json_bytes(mismatch)]:
            with self.assertRaises(exceptions.DeserializationError):
                TufKeyPair.from_bytes(key_id, data)

        unknown = TufKeyPair(key_id, "DSA", "pub", "priv")
        with self.assertRaises(ValueError):
            unknown.public_key()


# Run unit test.
if __name__ == "__main__":
    utils.configure_test_logging(sys.argv)
    unittest.main()
