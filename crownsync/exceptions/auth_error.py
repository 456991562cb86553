"""
CrownSync - Authentication Error Exception

Exception raised when the remote store session is missing or expired.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError


class CrownSyncAuthError(CrownSyncAPIError):
    """Exception for authentication errors."""
    pass
