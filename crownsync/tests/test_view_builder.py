"""
Tests for remote view building in CrownSync

Tests classification, display name precedence, tag reconstruction,
local linking and session view resolution.
"""

import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from crownsync.models import RemoteObjectDescriptor, ReconciliationContext
from crownsync.models.database import Session, VideoClip, SOURCE_REMOTE
from crownsync.models.sidecars import SessionMetadataSidecar, VideoMetadataSidecar
from crownsync.operations.catalog_lister import RemoteCatalogLister
from crownsync.operations.view_builder import RemoteViewBuilder, build_display_name, build_tag_views
from fakes import FakeRemoteStore, video_sidecar


def _descriptor(key, last_modified=1000, size=10, is_folder=False):
    return RemoteObjectDescriptor(key=key, is_folder=is_folder, size=size, last_modified_utc=last_modified)


def _classify(keys_with_dates):
    lister = RemoteCatalogLister(FakeRemoteStore())
    return lister.classify([_descriptor(key, lm) for key, lm in keys_with_dates])


def test_classify_partitions_listing():
    """Test objects are bucketed by kind and unknown keys skipped"""
    lister = RemoteCatalogLister(FakeRemoteStore())
    catalog = lister.classify([
        _descriptor("sessions/1/session.json"),
        _descriptor("sessions/1/videos/10.mp4"),
        _descriptor("CrownRFEP/sessions/1/videos/10.mp4"),
        _descriptor("sessions/1/metadata/10.json"),
        _descriptor("sessions/1/thumbnails/10.jpg"),
        _descriptor("sessions/1/notes.txt"),
        _descriptor("sessions/1/", is_folder=True),
    ])

    assert [obj.key for obj in catalog.videos] == ["sessions/1/videos/10.mp4"]
    assert list(catalog.video_metadata.keys()) == ["sessions/1/metadata/10.json"]
    assert [obj.session_id for obj in catalog.session_metadata] == [1]
    assert list(catalog.thumbnails.keys()) == ["sessions/1/thumbnails/10.jpg"]
    assert catalog.skipped == 1
    assert catalog.video_keys == {"sessions/1/videos/10.mp4"}

    print("Classification tests passed")


def test_display_name_precedence():
    """Test comparison name, athlete/session and file name fallbacks"""
    assert build_display_name("Salida A", "PÉREZ Ana", "Regional", "10.mp4") == "Salida A"
    assert build_display_name("  ", "PÉREZ Ana", "Regional", "10.mp4") == "PÉREZ Ana - Regional"
    assert build_display_name(None, "PÉREZ Ana", "", "10.mp4") == "PÉREZ Ana"
    assert build_display_name(None, "", "Regional", "10.mp4") == "10.mp4"

    print("Display name tests passed")


def test_video_views_use_sidecars():
    """Test display names built from video and session sidecars"""
    catalog = _classify([
        ("sessions/1/videos/10.mp4", 1200),
        ("sessions/1/metadata/10.json", 1300),
        ("sessions/1/videos/11.mp4", 1250),
        ("sessions/1/metadata/11.json", 1300),
        ("sessions/1/videos/12.mp4", 1100),
        ("sessions/1/thumbnails/12.jpg", 1100),
    ])
    sidecars = {
        "sessions/1/metadata/10.json": VideoMetadataSidecar.model_validate(video_sidecar(
            comparison_name="Salida A", athlete={"id": 4, "nombre": "Ana", "apellido": "Pérez"}
        )),
        "sessions/1/metadata/11.json": VideoMetadataSidecar.model_validate(video_sidecar(
            athlete={"id": 4, "nombre": "Ana", "apellido": "Pérez"}, section=2
        )),
    }
    context = ReconciliationContext()
    context.session_metadata[1] = SessionMetadataSidecar(sessionId=1, sessionName="Regional")

    views = RemoteViewBuilder().build_video_views(catalog, sidecars, [], {}, context)

    assert [view.display_name for view in views] == ["Salida A", "PÉREZ Ana - Regional", "12.mp4"]
    assert views[0].metadata_descriptor.last_modified_utc == 1300
    assert views[1].section == 2
    assert views[2].metadata is None
    assert views[2].metadata_descriptor is None
    assert views[2].thumbnail_key == "sessions/1/thumbnails/12.jpg"
    assert not any(view.is_linked for view in views)

    print("Video view tests passed")


def test_tag_views_from_inputs():
    """Test event tags are counted and plain tags come from non-event inputs"""
    sidecar = VideoMetadataSidecar.model_validate(video_sidecar(
        tags=[{"id": 3, "name": "Salida"}, {"id": 4, "name": "Técnica"}, {"id": 5, "name": "Sin usar"}],
        inputs=[
            {"isEvent": 1, "inputTypeId": 3},
            {"isEvent": 1, "inputTypeId": 3},
            {"isEvent": 1, "inputTypeId": 8, "inputValue": "Viraje"},
            {"isEvent": 0, "inputTypeId": 4},
            {"isEvent": 0, "inputTypeId": 4},
        ]
    ))

    tags, event_tags = build_tag_views(sidecar)
    assert [(tag.id, tag.name) for tag in tags] == [(4, "Técnica")]
    assert [(tag.id, tag.name, tag.event_count) for tag in event_tags] == [(3, "Salida", 2), (8, "Viraje", 1)]
    assert all(tag.is_event for tag in event_tags)

    only_tags = VideoMetadataSidecar.model_validate(video_sidecar(tags=[{"id": 5, "name": "Sin usar"}]))
    tags, event_tags = build_tag_views(only_tags)
    assert [(tag.id, tag.name) for tag in tags] == [(5, "Sin usar")]
    assert event_tags == []

    assert build_tag_views(None) == ([], [])

    print("Tag view tests passed")


def test_linking_is_prefix_and_case_insensitive():
    """Test a stored ClipPath with root prefix links to the listed key"""
    catalog = _classify([("sessions/1/videos/10.mp4", 1200)])
    clip = VideoClip(id=5, session_id=1, clip_path="CrownRFEP/Sessions/1/Videos/10.MP4", source=SOURCE_REMOTE)
    local_sessions = {1: Session(id=1, name="Local name")}

    views = RemoteViewBuilder().build_video_views(catalog, {}, [clip], local_sessions, ReconciliationContext())

    assert views[0].is_linked
    assert views[0].linked_local is clip
    assert views[0].session_name == "Local name"

    print("Linking tests passed")


def test_session_views_resolution():
    """Test session titles and dates fall back in order"""
    catalog = _classify([
        ("sessions/1/videos/10.mp4", 1200),
        ("sessions/1/videos/11.mp4", 1500),
        ("sessions/2/videos/20.mp4", 900),
        ("sessions/3/videos/30.mp4", 800),
    ])
    context = ReconciliationContext()
    context.session_metadata[1] = SessionMetadataSidecar(
        sessionId=1, sessionName="Regional", sessionDate="2024-05-01", place="Pista"
    )
    local_clip = VideoClip(id=9, session_id=2, clip_path="sessions/2/videos/20.mp4")
    local_sessions = {2: Session(id=2, name="Local dos", date_utc=500)}

    builder = RemoteViewBuilder()
    videos = builder.build_video_views(catalog, {}, [local_clip], local_sessions, context)
    sessions = builder.build_session_views(videos, local_sessions, context)

    by_id = {session.session_id: session for session in sessions}
    assert [session.session_id for session in sessions] == [1, 2, 3]

    assert by_id[1].title == "Regional"
    assert by_id[1].session_date_utc == 1714521600
    assert by_id[1].last_modified_utc == 1500
    assert by_id[1].video_count == 2
    assert by_id[1].place == "Pista"
    assert by_id[1].has_metadata

    assert by_id[2].title == "Local dos"
    assert by_id[2].session_date_utc == 900
    assert by_id[2].linked_local_session.id == 2

    assert by_id[3].title == "Sesión 3"
    assert by_id[3].session_date_utc == 800
    assert not by_id[3].has_metadata

    print("Session view tests passed")


if __name__ == "__main__":
    print("Running view builder tests...")
    print()

    test_classify_partitions_listing()
    test_display_name_precedence()
    test_video_views_use_sidecars()
    test_tag_views_from_inputs()
    test_linking_is_prefix_and_case_insensitive()
    test_session_views_resolution()

    print()
    print("All tests passed!")
