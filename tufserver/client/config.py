# Copyright 2021, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Configuration options for the server clients."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class ClientConfig:
    """Used to store client configuration.

    Args:
        socket_timeout: Timeout in seconds, used for both initial connection
            delay and the maximum delay between bytes received.
        app_user_agent: Application user agent, e.g. "MyApp/1.0.0". This will
            be prefixed to the client user agent when the default transport
            is used.
        headers: Headers added to every request, e.g. an ``Authorization``
            header when talking to the services through an API gateway.
    """

    socket_timeout: int = 30  # seconds
    app_user_agent: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
