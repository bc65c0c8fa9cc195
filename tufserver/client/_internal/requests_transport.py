# Copyright 2021, New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""Provides an implementation of ``TransportInterface`` using the Requests
HTTP library.
"""

import logging
import threading
from typing import Dict, Optional, Tuple
from urllib import parse

# Imports
import requests

import tufserver
from tufserver.api import exceptions
from tufserver.client.config import ClientConfig
from tufserver.client.transport import (
    HttpRequest,
    HttpResponse,
    TransportInterface,
)

# Globals
logger = logging.getLogger(__name__)


# Classes
class RequestsTransport(TransportInterface):
    """An implementation of ``TransportInterface`` based on the requests
    library.

    Attributes:
        socket_timeout: Timeout in seconds, used for both initial connection
            delay and the maximum delay between bytes received.
        app_user_agent: Prefixed to the user agent of every session.
        headers: Default headers added to every session.

    Requests are sent from worker threads. Sessions are created under a
    lock, a session is then shared by all requests to its scheme+hostname.
    """

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        if config is None:
            config = ClientConfig()

        # NOTE: We use a separate requests.Session per scheme+hostname
        # combination, in order to reuse connections to the same hostname to
        # improve efficiency, but avoiding sharing state between different
        # hosts-scheme combinations to minimize subtle security issues.
        # Some cookies may not be HTTP-safe.
        self._sessions: Dict[Tuple[str, str], requests.Session] = {}
        self._sessions_lock = threading.Lock()

        # Default settings
        self.socket_timeout: int = config.socket_timeout  # seconds
        self.app_user_agent = config.app_user_agent
        self.headers = dict(config.headers)

    def _send(self, request: HttpRequest) -> HttpResponse:
        """Send ``request`` to an HTTP/HTTPS server.

        Raises:
            exceptions.SlowRetrievalError: Timeout occurs while waiting for
                the server.
            exceptions.TransportError: The URL cannot be parsed or the
                connection failed.

        Returns:
            The received response, whatever its status code.
        """
        # Get a customized session for each new schema+hostname combination.
        session = self._get_session(request.url)

        # Always set the timeout. This timeout value is interpreted by
        # requests as:
        #  - connect timeout (max delay before first byte is received)
        #  - read (gap) timeout (max delay between bytes received)
        try:
            response = session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.socket_timeout,
            )
        except requests.exceptions.Timeout as e:
            raise exceptions.SlowRetrievalError(
                f"Timed out waiting for {request.url}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise exceptions.TransportError(
                f"Failed to {request.method} {request.url}"
            ) from e

        logger.debug(
            "%s %s: %d", request.method, request.url, response.status_code
        )

        return HttpResponse(
            status_code=response.status_code,
            body=response.content,
            headers=response.headers,
        )

    def _get_session(self, url: str) -> requests.Session:
        """Return a different customized requests.Session per schema+hostname
        combination.

        Raises:
            exceptions.TransportError: When there is a problem parsing the url.
        """
        # Use a different requests.Session per schema+hostname combination, to
        # reuse connections while minimizing subtle security issues.
        parsed_url = parse.urlparse(url)

        if not parsed_url.scheme:
            raise exceptions.TransportError(f"Failed to parse URL {url}")

        session_index = (parsed_url.scheme, parsed_url.hostname or "")

        with self._sessions_lock:
            session = self._sessions.get(session_index)

            if not session:
                session = requests.Session()
                self._sessions[session_index] = session

                ua = (
                    f"tufserver/{tufserver.__version__} "
                    f"{session.headers['User-Agent']}"
                )
                if self.app_user_agent is not None:
                    ua = f"{self.app_user_agent} {ua}"
                session.headers["User-Agent"] = ua
                session.headers.update(self.headers)

                logger.debug("Made new session %s", session_index)
            else:
                logger.debug("Reusing session %s", session_index)

        return session
