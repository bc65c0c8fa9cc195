# Copyright 2020, TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""
<Program Name>
  utils.py

<Purpose>
  Provide common utilities for tufserver tests
"""

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from tufserver.client.transport import (
    HttpRequest,
    HttpResponse,
    TransportInterface,
)

logger = logging.getLogger(__name__)

# Used when forming URLs on the client side
TEST_BASE_URI = "https://tuf.example.com"

KEY_ID = "e6c8b5b2d1c4c2e1e8f0f4e0b8a5d6a0b2c3d4e5f60718293a4b5c6d7e8f9012"
CHECKSUM = "0f0c1ae4e4a2b1f9d94cf2e01b45a2e0ab3b6f6cd0bfcbb7a0f1c9d0e8a7b6c5"


def configure_test_logging(argv: List[str]) -> None:
    """Configure logger level for a certain test file"""
    # parse arguments but only handle '-v': argv may contain
    # other things meant for unittest argument parser
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("-v", "--verbose", action="count", default=0)
    args, _ = parser.parse_known_args(argv)

    if args.verbose <= 1:
        # 0 and 1 both mean ERROR: this way '-v' makes unittest print test
        # names without increasing log level
        loglevel = logging.ERROR
    elif args.verbose == 2:
        loglevel = logging.WARNING
    elif args.verbose == 3:
        loglevel = logging.INFO
    else:
        loglevel = logging.DEBUG

    logging.basicConfig(level=loglevel)


def signed_role(role_type: str = "Root", version: int = 1) -> Dict[str, Any]:
    """Return the dict of a signed role as a reposerver would send it."""
    signed: Dict[str, Any] = {
        "_type": role_type,
        "version": version,
        "expires": "2030-01-01T00:00:00Z",
    }
    if role_type.lower() == "root":
        signed["consistent_snapshot"] = False
        signed["keys"] = {
            KEY_ID: {"keytype": "ED25519", "keyval": {"public": "ab" * 32}}
        }
        signed["roles"] = {"root": {"keyids": [KEY_ID], "threshold": 1}}
    else:
        signed["targets"] = {
            "firmware.bin": {
                "length": 3,
                "hashes": {"sha256": CHECKSUM},
                "custom": {"name": "firmware", "version": "1.0"},
            }
        }

    return {
        "signatures": [
            {"keyid": KEY_ID, "method": "ed25519", "sig": "cd" * 64}
        ],
        "signed": signed,
    }


def json_bytes(data: Any) -> bytes:
    return json.dumps(data).encode("utf-8")


def error_body(code: str, description: str = "error") -> bytes:
    return json_bytes({"code": code, "description": description})


class RecordingTransport(TransportInterface):
    """Transport answering every request with queued canned responses.

    Sent requests are recorded in ``requests``. When the queue holds a
    single response it is reused for all further requests.
    """

    def __init__(self, *responses: HttpResponse) -> None:
        self.responses = list(responses)
        self.requests: List[HttpRequest] = []

    def respond(
        self,
        status_code: int = 200,
        body: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.responses.append(HttpResponse(status_code, body, headers or {}))

    def _send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        logger.debug("%s %s", request.method, request.url)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def last_request(self) -> HttpRequest:
        return self.requests[-1]
