"""
CrownSync - Cancelled Error Exception

Exception raised when the caller abandons a reconciliation pass.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError


class CrownSyncCancelledError(CrownSyncAPIError):
    """Exception raised when a pass is cancelled between steps."""
    pass
