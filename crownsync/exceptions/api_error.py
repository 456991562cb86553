"""
CrownSync - API Error Exception

Base exception class for all CrownSync errors.

Author: CrownSync Project
"""


class CrownSyncAPIError(Exception):
    """Base exception for CrownSync errors."""
    pass
