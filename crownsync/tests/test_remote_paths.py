"""
Tests for the remote key grammar in CrownSync

Tests key normalization, parsing and key construction.
"""

import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from crownsync.remote_paths import (
    RemoteKeyKind, normalize_key, comparison_key, parse_remote_key,
    session_prefix, session_metadata_key, video_key, video_metadata_key,
    thumbnail_key, file_name
)


def test_normalize_key_strips_root_prefix():
    """Test root prefix and slash normalization"""
    assert normalize_key("CrownRFEP/sessions/1/videos/2.mp4") == "sessions/1/videos/2.mp4"
    assert normalize_key("crownrfep/sessions/1/videos/2.mp4") == "sessions/1/videos/2.mp4"
    assert normalize_key("/sessions/1/videos/2.mp4") == "sessions/1/videos/2.mp4"
    assert normalize_key("sessions\\1\\videos\\2.mp4") == "sessions/1/videos/2.mp4"
    assert normalize_key(None) == ""
    assert comparison_key("CrownRFEP/Sessions/1/Videos/2.MP4") == "sessions/1/videos/2.mp4"

    print("Normalization tests passed")


def test_parse_remote_key_kinds():
    """Test each of the four key shapes"""
    parsed = parse_remote_key("sessions/42/videos/7.mp4")
    assert parsed.kind == RemoteKeyKind.VIDEO
    assert parsed.session_id == 42
    assert parsed.video_id == 7

    parsed = parse_remote_key("CrownRFEP/sessions/42/metadata/7.json")
    assert parsed.kind == RemoteKeyKind.VIDEO_METADATA
    assert (parsed.session_id, parsed.video_id) == (42, 7)

    parsed = parse_remote_key("sessions/42/session.json")
    assert parsed.kind == RemoteKeyKind.SESSION_METADATA
    assert parsed.session_id == 42
    assert parsed.video_id is None

    parsed = parse_remote_key("sessions/42/thumbnails/7.jpg")
    assert parsed.kind == RemoteKeyKind.THUMBNAIL

    print("Key kind tests passed")


def test_parse_remote_key_rejects_other_keys():
    """Test keys outside the grammar are ignored"""
    assert parse_remote_key("sessions/0/videos/7.mp4") is None
    assert parse_remote_key("sessions/4/videos/0.mp4") is None
    assert parse_remote_key("sessions/abc/videos/7.mp4") is None
    assert parse_remote_key("sessions/4/videos/7.mov") is None
    assert parse_remote_key("sessions/4/metadata/7.mp4") is None
    assert parse_remote_key("sessions/4/extra/videos/7.mp4") is None
    assert parse_remote_key("other/4/videos/7.mp4") is None
    assert parse_remote_key("sessions/4/") is None

    print("Rejection tests passed")


def test_key_builders_round_trip():
    """Test built keys parse back to the same ids"""
    assert session_prefix(3) == "sessions/3/"
    assert session_metadata_key(3) == "sessions/3/session.json"
    assert video_key(3, 9) == "sessions/3/videos/9.mp4"
    assert video_metadata_key(3, 9) == "sessions/3/metadata/9.json"
    assert thumbnail_key(3, 9) == "sessions/3/thumbnails/9.jpg"

    parsed = parse_remote_key(thumbnail_key(3, 9))
    assert (parsed.kind, parsed.session_id, parsed.video_id) == (RemoteKeyKind.THUMBNAIL, 3, 9)

    assert file_name("CrownRFEP/sessions/3/videos/9.mp4") == "9.mp4"

    print("Builder tests passed")


if __name__ == "__main__":
    print("Running remote key grammar tests...")
    print()

    test_normalize_key_strips_root_prefix()
    test_parse_remote_key_kinds()
    test_parse_remote_key_rejects_other_keys()
    test_key_builders_round_trip()

    print()
    print("All tests passed!")
