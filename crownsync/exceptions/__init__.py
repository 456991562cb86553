"""
CrownSync - Exceptions Package

Contains all exception classes raised by CrownSync.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError
from .auth_error import CrownSyncAuthError
from .transport_error import CrownSyncTransportError
from .parse_error import CrownSyncParseError
from .permission_error import CrownSyncPermissionError
from .cancelled_error import CrownSyncCancelledError

__all__ = [
    'CrownSyncAPIError',
    'CrownSyncAuthError',
    'CrownSyncTransportError',
    'CrownSyncParseError',
    'CrownSyncPermissionError',
    'CrownSyncCancelledError'
]
