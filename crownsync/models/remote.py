"""
CrownSync - Remote Library Models

Dataclasses describing what a listing of the remote store returned and
the transient merged views built from it during one reconciliation pass.

Author: CrownSync Project
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from crownsync.remote_paths import RemoteKeyKind


@dataclass(frozen=True)
class RemoteObjectDescriptor:
    """
    One object returned by a listing call.

    last_modified_utc is in epoch seconds.
    """
    key: str
    is_folder: bool
    size: int
    last_modified_utc: int
    content_type: Optional[str] = None


@dataclass
class RemoteFileListing:
    """One page of a listing call."""
    files: List[RemoteObjectDescriptor] = field(default_factory=list)
    continuation_token: Optional[str] = None
    has_more: bool = False


@dataclass
class ClassifiedObject:
    """A descriptor that matched the key grammar."""
    descriptor: RemoteObjectDescriptor
    kind: RemoteKeyKind
    key: str  # normalized, root prefix stripped
    session_id: int
    video_id: Optional[int] = None


@dataclass
class RemoteCatalog:
    """
    Listing partitioned by object kind.

    Videos are kept in listing order; sidecars and thumbnails are
    indexed by their normalized, case-folded key.
    """
    videos: List[ClassifiedObject] = field(default_factory=list)
    video_metadata: Dict[str, ClassifiedObject] = field(default_factory=dict)
    session_metadata: List[ClassifiedObject] = field(default_factory=list)
    thumbnails: Dict[str, ClassifiedObject] = field(default_factory=dict)
    skipped: int = 0

    @property
    def video_keys(self) -> set:
        return {obj.key.lower() for obj in self.videos}


@dataclass
class TagView:
    """Tag shown on a remote video; event tags carry an occurrence count."""
    id: int
    name: str
    is_event: bool = False
    event_count: int = 0


@dataclass
class RemoteVideoView:
    """
    Merged view of one remote video for the duration of a pass.

    linked_local holds the local VideoClip whose ClipPath equals the key,
    when one exists.
    """
    session_id: int
    video_id: int
    key: str
    size: int
    last_modified_utc: int
    file_name: str
    display_name: str
    session_name: str = ""
    section: int = 0
    tags: List[TagView] = field(default_factory=list)
    event_tags: List[TagView] = field(default_factory=list)
    linked_local: Optional[Any] = None
    thumbnail_key: Optional[str] = None
    metadata: Optional[Any] = None  # VideoMetadataSidecar
    metadata_descriptor: Optional[RemoteObjectDescriptor] = None

    @property
    def is_linked(self) -> bool:
        return self.linked_local is not None


@dataclass
class RemoteSessionView:
    """Merged view of one remote session (one per distinct session id)."""
    session_id: int
    title: str
    session_date_utc: int
    last_modified_utc: int
    video_count: int
    place: Optional[str] = None
    coach: Optional[str] = None
    session_type: Optional[str] = None
    has_metadata: bool = False
    linked_local_session: Optional[Any] = None
