"""
CrownSync - Transport Error Exception

Exception raised when a request to the remote store or a signed URL fails.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError


class CrownSyncTransportError(CrownSyncAPIError):
    """Exception for network and server errors."""
    pass
