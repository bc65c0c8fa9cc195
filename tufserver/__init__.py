# Copyright New York University and the TUF contributors
# SPDX-License-Identifier: MIT OR Apache-2.0

"""tufserver: client for TUF reposerver and director HTTP services
"""

import tufserver.api
import tufserver.client

# This value is used in the requests user agent.
__version__ = "0.1.0"
__all__ = [
    tufserver.api.__name__,
    tufserver.client.__name__,
]
