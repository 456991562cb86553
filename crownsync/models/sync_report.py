"""
CrownSync - Sync Report Models

Results returned by a reconciliation pass and by remote session deletion.

Author: CrownSync Project
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SyncStatus(Enum):
    """
    Outcome of a reconciliation pass.

    States:
    - COMPLETED: every step ran (individual items may still have failed)
    - NOT_AUTHENTICATED: aborted before listing, nothing was touched
    - LISTING_FAILED: the initial listing failed, nothing was touched
    - CANCELLED: abandoned by the caller between steps
    """
    COMPLETED = "completed"
    NOT_AUTHENTICATED = "not_authenticated"
    LISTING_FAILED = "listing_failed"
    CANCELLED = "cancelled"


@dataclass
class SyncReport:
    """Counts and non-fatal errors collected during one pass"""
    status: SyncStatus = SyncStatus.COMPLETED
    imported: int = 0
    updated: int = 0
    sessions_created: int = 0
    sessions_updated: int = 0
    orphaned: int = 0
    sessions_removed: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    remote_videos: list = field(default_factory=list)
    remote_sessions: list = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == SyncStatus.COMPLETED

    @property
    def has_changes(self) -> bool:
        return any((
            self.imported, self.updated, self.sessions_created,
            self.sessions_updated, self.orphaned, self.sessions_removed,
        ))

    def add_error(self, message: str, failed: bool = True):
        """Record a non-fatal error; failed=False records it without counting a failed item."""
        self.errors.append(message)
        if failed:
            self.failed += 1

    def summary(self) -> str:
        return (f"status={self.status.value} imported={self.imported} updated={self.updated} "
                f"sessions_created={self.sessions_created} sessions_updated={self.sessions_updated} "
                f"orphaned={self.orphaned} sessions_removed={self.sessions_removed} "
                f"failed={self.failed}")


@dataclass
class DeletionReport:
    """Result of deleting a session from the remote store"""
    session_id: int
    deleted_keys: List[str] = field(default_factory=list)
    failed_keys: List[str] = field(default_factory=list)
    local_clips_removed: int = 0
    local_session_removed: bool = False
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return bool(self.failed_keys)
