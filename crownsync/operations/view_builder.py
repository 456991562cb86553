"""
CrownSync - Remote View Builder Module

Merges listing descriptors, sidecar metadata and linked local records
into the transient RemoteVideoView / RemoteSessionView objects of a pass.

Author: CrownSync Project
"""

import logging
from typing import Optional, Dict, List, Tuple

from crownsync.models.database import Session, VideoClip
from crownsync.models.remote import RemoteCatalog, RemoteVideoView, RemoteSessionView, TagView
from crownsync.models.reconciliation_context import ReconciliationContext
from crownsync.models.sidecars import VideoMetadataSidecar
from crownsync.remote_paths import (
    DEFAULT_ROOT_PREFIX, comparison_key, file_name, thumbnail_key, video_metadata_key
)

# Configure logging
logger = logging.getLogger(__name__)


def fallback_session_name(session_id: int) -> str:
    return f"Sesión {session_id}"


def build_display_name(comparison_name: Optional[str], athlete_name: str,
                       session_name: str, fallback: str) -> str:
    """
    Resolve the name shown for a remote video.

    Precedence: comparison name, then "{athlete} - {session}" (the athlete
    alone when there is no session name), then the fallback file name.
    """
    if comparison_name and comparison_name.strip():
        return comparison_name.strip()

    athlete_name = (athlete_name or "").strip()
    if athlete_name:
        session_name = (session_name or "").strip()
        return f"{athlete_name} - {session_name}" if session_name else athlete_name

    return fallback


def build_tag_views(sidecar: Optional[VideoMetadataSidecar]) -> Tuple[List[TagView], List[TagView]]:
    """
    Rebuild plain tags and counted event tags from a video sidecar.

    Event inputs are grouped by input type into one event tag each,
    carrying the number of occurrences. Non-event inputs become plain
    tags named by their matching tags entry; a sidecar without inputs
    shows every named tag.

    Args:
        sidecar: Video sidecar, or None

    Returns:
        Tuple of (plain tags, event tags)
    """
    if sidecar is None or (not sidecar.tags and not sidecar.inputs):
        return [], []

    names = sidecar.tag_names()

    event_tags = [
        TagView(id=type_id, name=sidecar.event_tag_name(type_id), is_event=True, event_count=len(group))
        for type_id, group in sidecar.event_groups().items()
    ]

    tags: List[TagView] = []
    if sidecar.inputs:
        seen = set()
        for item in sidecar.inputs:
            if item.is_event_input or item.input_type_id <= 0 or item.input_type_id in seen:
                continue
            name = (names.get(item.input_type_id) or "").strip()
            if not name:
                continue
            seen.add(item.input_type_id)
            tags.append(TagView(id=item.input_type_id, name=name))
    else:
        tags = [TagView(id=tag_id, name=name.strip()) for tag_id, name in names.items() if name.strip()]

    return tags, event_tags


class RemoteViewBuilder:
    """
    Builds the merged views of one pass.

    Views are derived only from the listing and the sidecars; local
    records are attached by reference and never modified here.
    """

    def __init__(self, root_prefix: str = DEFAULT_ROOT_PREFIX):
        self.root_prefix = root_prefix

    def index_local_clips(self, local_clips: List[VideoClip]) -> Dict[str, VideoClip]:
        """Map of case-folded normalized ClipPath to clip (first clip wins)."""
        index: Dict[str, VideoClip] = {}
        for clip in local_clips:
            key = comparison_key(clip.clip_path, self.root_prefix)
            if key and key not in index:
                index[key] = clip
        return index

    def build_video_views(self, catalog: RemoteCatalog,
                          video_sidecars: Dict[str, VideoMetadataSidecar],
                          local_clips: List[VideoClip],
                          local_sessions: Dict[int, Session],
                          context: ReconciliationContext) -> List[RemoteVideoView]:
        """
        Build one view per remote video file.

        Args:
            catalog: Classified listing
            video_sidecars: Loaded video sidecars keyed by case-folded key
            local_clips: Current local clips
            local_sessions: Local sessions keyed by id
            context: Pass context with the session sidecar cache

        Returns:
            RemoteVideoView list in listing order
        """
        clip_index = self.index_local_clips(local_clips)
        views: List[RemoteVideoView] = []

        for obj in catalog.videos:
            linked = clip_index.get(obj.key.lower())
            metadata_key = video_metadata_key(obj.session_id, obj.video_id).lower()
            metadata_obj = catalog.video_metadata.get(metadata_key)
            sidecar = video_sidecars.get(metadata_key)
            thumb = catalog.thumbnails.get(thumbnail_key(obj.session_id, obj.video_id).lower())

            session_name = self._session_name(obj.session_id, linked, local_sessions, context)
            athlete_name = sidecar.athlete.display_name if sidecar and sidecar.athlete else ""
            comparison_name = sidecar.comparison_name if sidecar else None
            name = file_name(obj.key)

            tags, event_tags = build_tag_views(sidecar)
            section = 0
            if sidecar and sidecar.video and sidecar.video.section:
                section = sidecar.video.section

            views.append(RemoteVideoView(
                session_id=obj.session_id,
                video_id=obj.video_id,
                key=obj.key,
                size=obj.descriptor.size,
                last_modified_utc=obj.descriptor.last_modified_utc,
                file_name=name,
                display_name=build_display_name(comparison_name, athlete_name, session_name, name),
                session_name=session_name,
                section=section,
                tags=tags,
                event_tags=event_tags,
                linked_local=linked,
                thumbnail_key=thumb.key if thumb else None,
                metadata=sidecar,
                metadata_descriptor=metadata_obj.descriptor if metadata_obj else None
            ))

        linked_count = sum(1 for view in views if view.is_linked)
        logger.debug(f"Built {len(views)} video views ({linked_count} linked)")
        return views

    def build_session_views(self, video_views: List[RemoteVideoView],
                            local_sessions: Dict[int, Session],
                            context: ReconciliationContext) -> List[RemoteSessionView]:
        """
        Build one view per distinct remote session id.

        Title: sidecar sessionName, else linked local session name, else
        "Sesión {id}". Date: sidecar sessionDateUtc, else sidecar
        sessionDate, else newest lastModified among the session's videos.

        Args:
            video_views: Result of build_video_views()
            local_sessions: Local sessions keyed by id
            context: Pass context with the session sidecar cache

        Returns:
            RemoteSessionView list in order of first appearance
        """
        groups: Dict[int, List[RemoteVideoView]] = {}
        for view in video_views:
            groups.setdefault(view.session_id, []).append(view)

        sessions: List[RemoteSessionView] = []
        for session_id, views in groups.items():
            sidecar = context.session_sidecar(session_id)
            local_session = self._linked_session(session_id, views, local_sessions)
            newest = max(view.last_modified_utc for view in views)

            title = sidecar.name if sidecar else None
            if not title and local_session is not None:
                title = local_session.display_name
            if not title:
                title = fallback_session_name(session_id)

            date_utc = sidecar.resolved_date_utc() if sidecar else None

            sessions.append(RemoteSessionView(
                session_id=session_id,
                title=title,
                session_date_utc=date_utc if date_utc else newest,
                last_modified_utc=newest,
                video_count=len(views),
                place=sidecar.clean_place if sidecar else None,
                coach=sidecar.clean_coach if sidecar else None,
                session_type=sidecar.clean_session_type if sidecar else None,
                has_metadata=sidecar is not None,
                linked_local_session=local_session
            ))

        return sessions

    def _session_name(self, session_id: int, linked: Optional[VideoClip],
                      local_sessions: Dict[int, Session], context: ReconciliationContext) -> str:
        sidecar = context.session_sidecar(session_id)
        if sidecar is not None and sidecar.name:
            return sidecar.name

        local_session = None
        if linked is not None:
            local_session = local_sessions.get(linked.session_id)
        if local_session is None:
            local_session = local_sessions.get(session_id)
        if local_session is not None:
            return local_session.display_name

        return fallback_session_name(session_id)

    @staticmethod
    def _linked_session(session_id: int, views: List[RemoteVideoView],
                        local_sessions: Dict[int, Session]) -> Optional[Session]:
        for view in views:
            if view.linked_local is not None:
                session = local_sessions.get(view.linked_local.session_id)
                if session is not None:
                    return session
        return local_sessions.get(session_id)
