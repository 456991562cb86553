"""
CrownSync - Metadata Applier Module

Writes the contents of a per-video sidecar onto a local clip: scalar
fields, athlete, tags, event inputs and timing events.

Author: CrownSync Project
"""

import logging
import time
from typing import Optional

from crownsync.gateways import LocalCatalogGateway
from crownsync.models.database import (
    VideoClip, Athlete, Tag, EventTagDefinition, EventInput, TimingEvent
)
from crownsync.models.sidecars import VideoMetadataSidecar, AthleteSidecarData

# Configure logging
logger = logging.getLogger(__name__)


def is_http_url(value: Optional[str]) -> bool:
    if not value:
        return False
    lowered = value.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


class MetadataApplier:
    """
    Applies video sidecars to local clips.

    All writes go through the catalog gateway on the calling thread.
    """

    def __init__(self, catalog: LocalCatalogGateway):
        self.catalog = catalog

    def apply(self, clip: VideoClip, sidecar: VideoMetadataSidecar,
              replace_inputs: bool = False, watermark: Optional[int] = None) -> VideoClip:
        """
        Apply a sidecar to a clip.

        Args:
            clip: Local clip (must already have an id)
            sidecar: Decoded video sidecar
            replace_inputs: Delete the clip's existing event inputs first
            watermark: Sidecar lastModified to record in last_sync_utc;
                       the watermark never moves backwards

        Returns:
            The updated clip
        """
        if replace_inputs:
            removed = self.catalog.delete_event_inputs_by_video(clip.id)
            logger.debug(f"Removed {removed} event input(s) from clip {clip.id}")

        self._apply_scalars(clip, sidecar)

        if sidecar.athlete is not None and sidecar.athlete.id > 0:
            self._apply_athlete(clip, sidecar.athlete)

        if sidecar.inputs:
            self._apply_inputs(clip, sidecar)
        elif sidecar.tags:
            self._apply_tags_as_inputs(clip, sidecar)

        self._replace_timing_events(clip, sidecar)

        if watermark is not None:
            clip.last_sync_utc = max(clip.last_sync_utc or 0, watermark)

        return self.catalog.update_video_clip(clip)

    @staticmethod
    def _apply_scalars(clip: VideoClip, sidecar: VideoMetadataSidecar):
        video = sidecar.video
        if video is None:
            return

        if video.comparison_name and video.comparison_name.strip():
            clip.comparison_name = video.comparison_name.strip()
        if video.section and video.section > 0:
            clip.section = video.section
        if video.clip_duration and video.clip_duration > 0:
            clip.clip_duration = video.clip_duration
        if video.clip_size and video.clip_size > 0:
            clip.clip_size = video.clip_size
        if is_http_url(video.thumbnail_path):
            clip.thumbnail_path = video.thumbnail_path.strip()

    def _apply_athlete(self, clip: VideoClip, data: AthleteSidecarData):
        athlete = self.catalog.get_athlete_by_id(data.id)
        if athlete is None:
            athlete = Athlete(
                id=data.id,
                first_name=data.nombre or "",
                last_name=data.apellido or "",
                category=str(data.category) if data.category is not None else None,
                category_id=data.categoria_id or 0,
                favorite=data.favorite or 0
            )
            self.catalog.save_athlete(athlete)
            logger.debug(f"Created athlete {data.id} ({data.display_name})")

        if not clip.athlete_id or clip.athlete_id <= 0:
            clip.athlete_id = data.id

    def _apply_inputs(self, clip: VideoClip, sidecar: VideoMetadataSidecar):
        for tag in sidecar.tags:
            if tag.id > 0:
                self.catalog.save_tag(Tag(id=tag.id, name=tag.name))

        for type_id in sidecar.event_groups():
            if self.catalog.get_event_tag_by_id(type_id) is None:
                self.catalog.insert_event_tag(EventTagDefinition(id=type_id, name=sidecar.event_tag_name(type_id)))

        for item in sidecar.inputs:
            self.catalog.save_event_input(EventInput(
                session_id=clip.session_id,
                video_id=clip.id,
                athlete_id=item.athlete_id,
                category_id=item.categoria_id,
                input_type_id=item.input_type_id,
                input_date_time=item.input_date_time,
                input_value=item.input_value,
                timestamp_ms=item.timestamp_ms or 0,
                is_event=1 if item.is_event_input else 0
            ))

    def _apply_tags_as_inputs(self, clip: VideoClip, sidecar: VideoMetadataSidecar):
        now = int(time.time())
        for tag in sidecar.tags:
            if tag.id <= 0:
                continue
            self.catalog.save_tag(Tag(id=tag.id, name=tag.name))
            self.catalog.save_event_input(EventInput(
                session_id=clip.session_id,
                video_id=clip.id,
                athlete_id=clip.athlete_id or 0,
                category_id=0,
                input_type_id=tag.id,
                input_date_time=now,
                input_value=tag.name,
                timestamp_ms=0,
                is_event=0
            ))

    def _replace_timing_events(self, clip: VideoClip, sidecar: VideoMetadataSidecar):
        self.catalog.delete_timing_events_by_video(clip.id)
        events = [
            TimingEvent(
                video_id=clip.id,
                session_id=clip.session_id,
                athlete_id=item.athlete_id,
                section_id=item.section_id,
                kind=item.kind,
                elapsed_ms=item.elapsed_ms,
                split_ms=item.split_ms,
                lap_index=item.lap_index,
                run_index=item.run_index,
                created_at=item.created_at
            )
            for item in sidecar.timing_events
        ]
        if events:
            self.catalog.insert_timing_events(events)
        clip.has_timing = bool(events)
