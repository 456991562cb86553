"""
CrownSync - Permission Error Exception

Exception raised when a write to the shared library is attempted
without write permission.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError


class CrownSyncPermissionError(CrownSyncAPIError):
    """Exception raised for operations that need a write-capable role."""
    pass
