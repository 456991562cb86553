"""
CrownSync - Parse Error Exception

Exception raised when a metadata sidecar cannot be decoded.

Author: CrownSync Project
"""

from .api_error import CrownSyncAPIError


class CrownSyncParseError(CrownSyncAPIError):
    """Exception for malformed sidecar JSON."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
