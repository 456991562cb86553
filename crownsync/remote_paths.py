"""
CrownSync - Remote Key Grammar Module

Parses and builds the object keys used in the shared remote store.

Key layout:
    sessions/{sessionId}/session.json
    sessions/{sessionId}/videos/{videoId}.mp4
    sessions/{sessionId}/metadata/{videoId}.json
    sessions/{sessionId}/thumbnails/{videoId}.jpg

Any key may carry the historical root prefix "CrownRFEP/", which is
stripped before matching and before comparing against the ClipPath
values stored in the local catalog.

Author: CrownSync Project
"""

import re
from enum import Enum
from typing import Optional, NamedTuple


# Historical root prefix prepended by older uploads
DEFAULT_ROOT_PREFIX = "CrownRFEP/"

SESSIONS_ROOT = "sessions/"

_SESSION_METADATA_RE = re.compile(r"^sessions/(\d+)/session\.json$", re.IGNORECASE)
_VIDEO_RE = re.compile(r"^sessions/(\d+)/videos/(\d+)\.mp4$", re.IGNORECASE)
_VIDEO_METADATA_RE = re.compile(r"^sessions/(\d+)/metadata/(\d+)\.json$", re.IGNORECASE)
_THUMBNAIL_RE = re.compile(r"^sessions/(\d+)/thumbnails/(\d+)\.jpg$", re.IGNORECASE)


class RemoteKeyKind(Enum):
    """
    Kinds of object recognised by the key grammar.

    Kinds:
    - VIDEO: primary video file
    - VIDEO_METADATA: per-video JSON sidecar
    - SESSION_METADATA: per-session JSON sidecar
    - THUMBNAIL: video thumbnail (display only)
    """
    VIDEO = "video"
    VIDEO_METADATA = "video_metadata"
    SESSION_METADATA = "session_metadata"
    THUMBNAIL = "thumbnail"


class ParsedKey(NamedTuple):
    """Result of parsing a normalized key."""
    kind: RemoteKeyKind
    session_id: int
    video_id: Optional[int]


def normalize_key(key: Optional[str], root_prefix: str = DEFAULT_ROOT_PREFIX) -> str:
    """
    Normalize a remote key or stored ClipPath for comparison.

    Converts backslashes to forward slashes, drops leading slashes and
    strips the historical root prefix (case-insensitive).

    Args:
        key: Raw key as returned by a listing or stored locally
        root_prefix: Root prefix to strip

    Returns:
        Key relative to the remote root ("" for None)
    """
    if not key:
        return ""

    normalized = key.replace("\\", "/").lstrip("/")
    if root_prefix and normalized.lower().startswith(root_prefix.lower()):
        normalized = normalized[len(root_prefix):]
    return normalized


def comparison_key(key: Optional[str], root_prefix: str = DEFAULT_ROOT_PREFIX) -> str:
    """Case-folded normalized key used for set membership tests."""
    return normalize_key(key, root_prefix).lower()


def _positive(value: str) -> Optional[int]:
    number = int(value)
    return number if number > 0 else None


def parse_remote_key(key: str, root_prefix: str = DEFAULT_ROOT_PREFIX) -> Optional[ParsedKey]:
    """
    Parse a key against the grammar.

    Args:
        key: Raw or normalized key
        root_prefix: Root prefix to strip first

    Returns:
        ParsedKey, or None when the key matches none of the four shapes
        or carries a non-positive id
    """
    normalized = normalize_key(key, root_prefix)

    match = _SESSION_METADATA_RE.match(normalized)
    if match:
        session_id = _positive(match.group(1))
        if session_id is None:
            return None
        return ParsedKey(RemoteKeyKind.SESSION_METADATA, session_id, None)

    for kind, pattern in (
        (RemoteKeyKind.VIDEO, _VIDEO_RE),
        (RemoteKeyKind.VIDEO_METADATA, _VIDEO_METADATA_RE),
        (RemoteKeyKind.THUMBNAIL, _THUMBNAIL_RE),
    ):
        match = pattern.match(normalized)
        if match:
            session_id = _positive(match.group(1))
            video_id = _positive(match.group(2))
            if session_id is None or video_id is None:
                return None
            return ParsedKey(kind, session_id, video_id)

    return None


def session_prefix(session_id: int) -> str:
    return f"sessions/{session_id}/"


def session_metadata_key(session_id: int) -> str:
    return f"sessions/{session_id}/session.json"


def video_key(session_id: int, video_id: int) -> str:
    return f"sessions/{session_id}/videos/{video_id}.mp4"


def video_metadata_key(session_id: int, video_id: int) -> str:
    return f"sessions/{session_id}/metadata/{video_id}.json"


def thumbnail_key(session_id: int, video_id: int) -> str:
    return f"sessions/{session_id}/thumbnails/{video_id}.jpg"


def file_name(key: str) -> str:
    """Last path segment of a key (e.g. "67.mp4")."""
    return normalize_key(key, "").rsplit("/", 1)[-1]
