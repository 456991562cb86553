"""
Tests for metadata sidecar parsing in CrownSync

Tests field aliases, date resolution and event tag naming.
"""

import json
import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from crownsync.exceptions import CrownSyncParseError
from crownsync.models.sidecars import SessionMetadataSidecar, VideoMetadataSidecar, AthleteSidecarData


def test_session_sidecar_fields():
    """Test camelCase fields and cleaned values"""
    sidecar = SessionMetadataSidecar.from_json("sessions/5/session.json", json.dumps({
        "sessionId": 5,
        "sessionName": "  Entreno Tarde ",
        "place": "Río Norte",
        "coach": "   ",
        "sessionType": "Técnica",
        "unknownField": True
    }))

    assert sidecar.session_id == 5
    assert sidecar.name == "Entreno Tarde"
    assert sidecar.clean_place == "Río Norte"
    assert sidecar.clean_coach is None
    assert sidecar.clean_session_type == "Técnica"

    print("Session sidecar field tests passed")


def test_session_date_resolution():
    """Test epoch date wins over calendar date"""
    both = SessionMetadataSidecar(sessionId=1, sessionDateUtc=1714550400, sessionDate="2020-01-01")
    assert both.resolved_date_utc() == 1714550400

    calendar = SessionMetadataSidecar(sessionId=1, sessionDate="2024-05-01")
    assert calendar.resolved_date_utc() == 1714521600

    with_time = SessionMetadataSidecar(sessionId=1, sessionDate="2024-05-01T10:00:00Z")
    assert with_time.resolved_date_utc() == 1714557600

    zero = SessionMetadataSidecar(sessionId=1, sessionDateUtc=0)
    assert zero.resolved_date_utc() is None

    garbage = SessionMetadataSidecar(sessionId=1, sessionDate="not a date")
    assert garbage.resolved_date_utc() is None

    print("Session date tests passed")


def test_malformed_sidecar_raises_parse_error():
    """Test invalid JSON and schema mismatches"""
    with pytest.raises(CrownSyncParseError) as excinfo:
        VideoMetadataSidecar.from_json("sessions/1/metadata/2.json", "{not json")
    assert excinfo.value.key == "sessions/1/metadata/2.json"

    with pytest.raises(CrownSyncParseError):
        VideoMetadataSidecar.from_json("sessions/1/metadata/2.json", json.dumps({"inputs": "nope"}))

    print("Parse error tests passed")


def test_video_sidecar_aliases_and_null_lists():
    """Test legacy timestamp alias, null lists and numeric category"""
    sidecar = VideoMetadataSidecar.from_json("k", json.dumps({
        "video": {"comparisonName": "Salida A", "creationDateUtc": 1700000000},
        "athlete": {"id": 3, "nombre": "Ana", "apellido": "Pérez", "category": 2},
        "tags": None,
        "inputs": [{"isEvent": 1, "inputTypeId": 4, "timestamp": 1500}],
        "timingEvents": None
    }))

    assert sidecar.comparison_name == "Salida A"
    assert sidecar.video.creation_date == 1700000000
    assert sidecar.athlete.category == 2
    assert sidecar.tags == []
    assert sidecar.timing_events == []
    assert sidecar.inputs[0].timestamp_ms == 1500
    assert sidecar.inputs[0].is_event_input

    print("Alias tests passed")


def test_athlete_display_name():
    """Test surname upper-casing and first-name fallback"""
    assert AthleteSidecarData(nombre="Ana", apellido="Pérez").display_name == "PÉREZ Ana"
    assert AthleteSidecarData(nombre="Ana").display_name == "Ana"
    assert AthleteSidecarData(nombre="Ana", apellido="  ").display_name == "Ana"
    assert AthleteSidecarData().display_name == ""

    print("Athlete name tests passed")


def test_event_groups_and_names():
    """Test event grouping and the tag name fallback chain"""
    sidecar = VideoMetadataSidecar.model_validate({
        "tags": [{"id": 3, "name": "Salida"}, {"id": 3, "name": "Duplicada"}],
        "inputs": [
            {"isEvent": 1, "inputTypeId": 3},
            {"isEvent": 1, "inputTypeId": 3},
            {"isEvent": 1, "inputTypeId": 8, "inputValue": " "},
            {"isEvent": 1, "inputTypeId": 8, "inputValue": "Viraje"},
            {"isEvent": 1, "inputTypeId": 9},
            {"isEvent": 1, "inputTypeId": 0},
            {"isEvent": 0, "inputTypeId": 3}
        ]
    })

    groups = sidecar.event_groups()
    assert list(groups.keys()) == [3, 8, 9]
    assert len(groups[3]) == 2

    assert sidecar.tag_names() == {3: "Salida"}
    assert sidecar.event_tag_name(3) == "Salida"
    assert sidecar.event_tag_name(8) == "Viraje"
    assert sidecar.event_tag_name(9) == "Tag 9"

    print("Event grouping tests passed")


if __name__ == "__main__":
    print("Running sidecar tests...")
    print()

    test_session_sidecar_fields()
    test_session_date_resolution()
    test_malformed_sidecar_raises_parse_error()
    test_video_sidecar_aliases_and_null_lists()
    test_athlete_display_name()
    test_event_groups_and_names()

    print()
    print("All tests passed!")
