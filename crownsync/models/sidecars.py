"""
CrownSync - Metadata Sidecar Models

Pydantic models for the JSON sidecars stored next to sessions and videos
in the remote store.

Author: CrownSync Project
"""

from datetime import datetime, date, timezone
from typing import Optional, List, Union

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, ValidationError, field_validator

from crownsync.exceptions import CrownSyncParseError


def _clean(value: Optional[str]) -> Optional[str]:
    """Return the stripped string, or None when blank."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class SidecarModel(BaseModel):
    """Shared configuration: camelCase on the wire, unknown keys ignored"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_json(cls, key: str, text: Union[str, bytes]):
        """
        Decode a sidecar document.

        Args:
            key: Remote key the document came from (for error messages)
            text: Raw JSON document

        Returns:
            Validated model instance

        Raises:
            CrownSyncParseError: If the document is not valid JSON or does
                not match the schema
        """
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise CrownSyncParseError(key, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}")
        except ValueError as e:
            raise CrownSyncParseError(key, str(e))


class SessionMetadataSidecar(SidecarModel):
    """Contents of sessions/{id}/session.json"""
    session_id: int = Field(0, alias="sessionId")
    session_name: Optional[str] = Field(None, alias="sessionName")
    place: Optional[str] = None
    coach: Optional[str] = None
    session_type: Optional[str] = Field(None, alias="sessionType")
    session_date_utc: Optional[int] = Field(None, alias="sessionDateUtc")
    session_date: Optional[str] = Field(None, alias="sessionDate")

    @property
    def name(self) -> Optional[str]:
        return _clean(self.session_name)

    @property
    def clean_place(self) -> Optional[str]:
        return _clean(self.place)

    @property
    def clean_coach(self) -> Optional[str]:
        return _clean(self.coach)

    @property
    def clean_session_type(self) -> Optional[str]:
        return _clean(self.session_type)

    def resolved_date_utc(self) -> Optional[int]:
        """
        Session date as epoch seconds.

        sessionDateUtc wins when positive; otherwise the ISO 8601
        sessionDate is read as a UTC calendar day (a time part, if any,
        is kept).

        Returns:
            Epoch seconds, or None when neither field is usable
        """
        if self.session_date_utc and self.session_date_utc > 0:
            return int(self.session_date_utc)

        raw = _clean(self.session_date)
        if not raw:
            return None

        if raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            try:
                parsed_day = date.fromisoformat(raw[:10])
            except ValueError:
                return None
            parsed = datetime(parsed_day.year, parsed_day.month, parsed_day.day)

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())


class VideoSidecarData(SidecarModel):
    """The "video" block of a per-video sidecar"""
    id: int = 0
    session_id: int = Field(0, alias="sessionId")
    atleta_id: int = Field(0, alias="atletaId")
    comparison_name: Optional[str] = Field(None, alias="comparisonName")
    section: Optional[int] = None
    clip_duration: Optional[float] = Field(None, alias="clipDuration")
    clip_size: Optional[int] = Field(None, alias="clipSize")
    creation_date: Optional[int] = Field(
        None, validation_alias=AliasChoices("creationDate", "creationDateUtc", "creation_date")
    )
    clip_path: Optional[str] = Field(None, alias="clipPath")
    thumbnail_path: Optional[str] = Field(None, alias="thumbnailPath")


class AthleteSidecarData(SidecarModel):
    """The "athlete" block of a per-video sidecar"""
    id: int = 0
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    category: Optional[Union[int, str]] = None
    categoria_id: Optional[int] = Field(None, alias="categoriaId")
    favorite: Optional[int] = None

    @property
    def display_name(self) -> str:
        """"APELLIDO Nombre", or just the first name when there is no surname"""
        apellido = _clean(self.apellido)
        if apellido:
            return f"{apellido.upper()} {self.nombre or ''}".strip()
        return (self.nombre or "").strip()


class TagSidecarData(SidecarModel):
    id: int = 0
    name: Optional[str] = None


class InputSidecarData(SidecarModel):
    """One event-input row: an event occurrence or a tag assignment"""
    id: int = 0
    session_id: int = Field(0, alias="sessionId")
    video_id: int = Field(0, alias="videoId")
    athlete_id: int = Field(0, alias="athleteId")
    categoria_id: int = Field(0, alias="categoriaId")
    is_event: int = Field(0, alias="isEvent")
    input_type_id: int = Field(0, alias="inputTypeId")
    input_date_time: int = Field(0, alias="inputDateTime")
    input_value: Optional[str] = Field(None, alias="inputValue")
    timestamp_ms: Optional[int] = Field(
        None, validation_alias=AliasChoices("timestampMs", "timestamp", "timestamp_ms")
    )

    @property
    def is_event_input(self) -> bool:
        return bool(self.is_event)


class TimingEventSidecarData(SidecarModel):
    """One timing (stopwatch) event; replaced wholesale on refresh"""
    athlete_id: int = Field(0, alias="athleteId")
    section_id: int = Field(0, alias="sectionId")
    kind: int = 0
    elapsed_ms: int = Field(0, alias="elapsedMs")
    split_ms: int = Field(0, alias="splitMs")
    lap_index: int = Field(0, alias="lapIndex")
    run_index: int = Field(0, alias="runIndex")
    created_at: int = Field(0, alias="createdAt")


class VideoMetadataSidecar(SidecarModel):
    """Contents of sessions/{id}/metadata/{videoId}.json"""
    version: int = 1
    video_id: int = Field(0, alias="videoId")
    session_id: int = Field(0, alias="sessionId")
    video: Optional[VideoSidecarData] = None
    athlete: Optional[AthleteSidecarData] = None
    tags: List[TagSidecarData] = Field(default_factory=list)
    inputs: List[InputSidecarData] = Field(default_factory=list)
    timing_events: List[TimingEventSidecarData] = Field(default_factory=list, alias="timingEvents")
    synced_at_utc: Optional[int] = Field(None, alias="syncedAtUtc")

    @field_validator("tags", "inputs", "timing_events", mode="before")
    @classmethod
    def _null_lists(cls, value):
        return [] if value is None else value

    @property
    def comparison_name(self) -> Optional[str]:
        return _clean(self.video.comparison_name) if self.video else None

    def tag_names(self) -> dict:
        """Map of tag id to name (first entry wins, ids <= 0 skipped)."""
        names = {}
        for tag in self.tags:
            if tag.id > 0 and tag.id not in names:
                names[tag.id] = tag.name or ""
        return names

    def event_groups(self) -> dict:
        """
        Event inputs grouped by inputTypeId, in first-seen order.

        Returns:
            Dict of input type id to list of InputSidecarData
        """
        groups = {}
        for item in self.inputs:
            if item.is_event_input and item.input_type_id > 0:
                groups.setdefault(item.input_type_id, []).append(item)
        return groups

    def event_tag_name(self, input_type_id: int) -> str:
        """
        Name for an event tag: matching tag entry, else the first
        non-blank inputValue of the group, else "Tag {id}".
        """
        name = _clean(self.tag_names().get(input_type_id))
        if name:
            return name
        for item in self.event_groups().get(input_type_id, []):
            value = _clean(item.input_value)
            if value:
                return value
        return f"Tag {input_type_id}"
