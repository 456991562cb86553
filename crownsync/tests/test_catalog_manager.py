"""
Tests for the SQLite local catalog in CrownSync

Tests session id preservation, clip CRUD and cascading clip deletion.
"""

import sys
import tempfile
from pathlib import Path

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from crownsync.models.database import (
    Session, VideoClip, Athlete, Tag, EventTagDefinition, EventInput, TimingEvent, SOURCE_REMOTE
)
from fakes import make_catalog


def test_insert_session_keeps_id():
    """Test sessions keep caller-assigned ids"""
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = make_catalog(tmpdir)

        catalog.insert_session_with_id(Session(id=99, name="Regional", date_utc=1714521600))
        session = catalog.get_session_by_id(99)
        assert session is not None
        assert session.name == "Regional"
        assert session.display_name == "Regional"

        with pytest.raises(ValueError):
            catalog.insert_session_with_id(Session(name="No id"))

        unnamed = Session(id=7)
        assert unnamed.display_name == "Sesión 7"

        catalog.close()

    print("Session insert tests passed")


def test_save_session_updates_detached_copy():
    """Test detached sessions can be modified and saved back"""
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = make_catalog(tmpdir)
        catalog.insert_session_with_id(Session(id=1, name="Old"))

        session = catalog.get_session_by_id(1)
        session.name = "New"
        session.place = "Pista"
        catalog.save_session(session)

        reloaded = catalog.get_session_by_id(1)
        assert reloaded.name == "New"
        assert reloaded.place == "Pista"

        assert catalog.delete_session(1)
        assert not catalog.delete_session(1)
        assert catalog.get_session_by_id(1) is None

        catalog.close()

    print("Session save tests passed")


def test_video_clip_insert_and_update():
    """Test clip ids are assigned and updates persist"""
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = make_catalog(tmpdir)
        catalog.insert_session_with_id(Session(id=1, name="S"))

        clip = catalog.insert_video_clip(VideoClip(
            session_id=1, clip_path="sessions/1/videos/10.mp4", source=SOURCE_REMOTE, last_sync_utc=0
        ))
        assert clip.id is not None
        assert clip.is_remote

        clip.comparison_name = "Salida A"
        clip.last_sync_utc = 1300
        catalog.update_video_clip(clip)

        clips = catalog.get_video_clips_by_session(1)
        assert len(clips) == 1
        assert clips[0].comparison_name == "Salida A"
        assert clips[0].last_sync_utc == 1300
        assert len(catalog.get_all_video_clips()) == 1

        catalog.close()

    print("Clip CRUD tests passed")


def test_delete_video_clip_removes_inputs_and_timing():
    """Test clip deletion cascades to its event inputs and timing events"""
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = make_catalog(tmpdir)
        catalog.insert_session_with_id(Session(id=1, name="S"))
        clip = catalog.insert_video_clip(VideoClip(session_id=1, clip_path="sessions/1/videos/10.mp4"))
        other = catalog.insert_video_clip(VideoClip(session_id=1, clip_path="sessions/1/videos/11.mp4"))

        catalog.save_event_input(EventInput(session_id=1, video_id=clip.id, input_type_id=3, is_event=1))
        catalog.save_event_input(EventInput(session_id=1, video_id=other.id, input_type_id=3, is_event=1))
        catalog.insert_timing_events([TimingEvent(session_id=1, video_id=clip.id, elapsed_ms=500)])

        assert catalog.delete_video_clip(clip.id)
        assert catalog.get_event_inputs_by_video(clip.id) == []
        assert catalog.get_timing_events_by_video(clip.id) == []
        assert len(catalog.get_event_inputs_by_video(other.id)) == 1
        assert not catalog.delete_video_clip(clip.id)

        catalog.close()

    print("Cascade delete tests passed")


def test_tags_events_and_athletes():
    """Test tag, event tag and athlete persistence"""
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = make_catalog(tmpdir)

        catalog.save_tag(Tag(id=3, name="Salida"))
        catalog.save_tag(Tag(id=3, name="Salida larga"))
        catalog.insert_event_tag(EventTagDefinition(id=8, name="Viraje"))
        catalog.save_athlete(Athlete(id=4, first_name="Ana", last_name="Pérez"))

        assert catalog.get_event_tag_by_id(8).name == "Viraje"
        assert catalog.get_event_tag_by_id(9) is None
        assert catalog.get_athlete_by_id(4).last_name == "Pérez"

        assert catalog.insert_timing_events([]) == 0
        assert catalog.delete_event_inputs_by_video(123) == 0

        catalog.close()

    print("Tag and athlete tests passed")


if __name__ == "__main__":
    print("Running catalog manager tests...")
    print()

    test_insert_session_keeps_id()
    test_save_session_updates_detached_copy()
    test_video_clip_insert_and_update()
    test_delete_video_clip_removes_inputs_and_timing()
    test_tags_events_and_athletes()

    print()
    print("All tests passed!")
