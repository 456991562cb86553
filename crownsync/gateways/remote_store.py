"""
CrownSync - Remote Object Store Gateway

Contract for listing, signing and deleting objects in the shared store.

Author: CrownSync Project
"""

from abc import ABC, abstractmethod
from typing import Optional

from crownsync.models.remote import RemoteFileListing


class RemoteObjectStoreGateway(ABC):
    """
    Remote object store consumed by the reconciliation engine.

    Implementations raise CrownSyncAuthError when not authenticated and
    CrownSyncTransportError on network or server failures.
    """

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """True when requests can be made."""

    @abstractmethod
    def list_files(self, prefix: str, max_items: int = 1000,
                   continuation_token: Optional[str] = None) -> RemoteFileListing:
        """
        List one page of objects under a prefix.

        Args:
            prefix: Key prefix relative to the team root (e.g. "sessions/")
            max_items: Maximum objects in this page
            continuation_token: Token returned by the previous page

        Returns:
            RemoteFileListing with has_more set when another page exists
        """

    @abstractmethod
    def get_signed_download_url(self, key: str, expiration_minutes: int = 60) -> str:
        """Return a short-lived URL from which the object can be fetched."""

    @abstractmethod
    def delete_file(self, key: str) -> bool:
        """Delete one object. Returns True when the server confirmed it."""
