"""
CrownSync - Reconciliation Engine Module

Runs a reconciliation pass between the shared remote store and the local
catalog, and propagates remote session deletions.

Pass steps:
1. List every object under the prefix
2. Partition the listing by key kind
3. Load session sidecars
4. Remove local remote-origin clips whose video disappeared (and empty sessions)
5. Build remote video and session views
6. Import unlinked remote videos
7. Push session sidecar fields onto linked local sessions
8. Refresh linked clips whose sidecar is newer than their watermark

Author: CrownSync Project
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Callable, Dict, List, Set

import requests

from crownsync.exceptions import (
    CrownSyncAPIError, CrownSyncAuthError, CrownSyncTransportError,
    CrownSyncPermissionError, CrownSyncCancelledError
)
from crownsync.gateways import RemoteObjectStoreGateway, LocalCatalogGateway
from crownsync.models.database import VideoClip, SOURCE_REMOTE
from crownsync.models.remote import RemoteCatalog, RemoteVideoView, RemoteSessionView
from crownsync.models.reconciliation_context import ReconciliationContext, IMPORT_SCOPE_LINKED_SESSIONS
from crownsync.models.sync_report import SyncReport, SyncStatus, DeletionReport
from crownsync.operations.catalog_lister import RemoteCatalogLister
from crownsync.operations.metadata_applier import MetadataApplier
from crownsync.operations.session_matcher import SessionMatcher, apply_session_sidecar
from crownsync.operations.sidecar_loader import MetadataSidecarLoader
from crownsync.operations.view_builder import RemoteViewBuilder
from crownsync.remote_paths import comparison_key, normalize_key, session_prefix, video_key

# Configure logging
logger = logging.getLogger(__name__)

TOTAL_STEPS = 8


class ReconciliationEngine:
    """
    Reconciles the local catalog with the remote store.

    Responsibilities:
    - Execute reconciliation passes (run)
    - Delete a session from the remote store and mirror it locally
    - Serialize passes issued against the same engine
    - Report progress via callbacks

    Network calls (sidecar loads, deletions) fan out over a bounded
    thread pool; every catalog write happens on the calling thread.
    """

    def __init__(self, remote_store: RemoteObjectStoreGateway, catalog: LocalCatalogGateway,
                 http_session: Optional[requests.Session] = None,
                 max_workers: int = 4, timeout: int = 30):
        """
        Initialize reconciliation engine.

        Args:
            remote_store: RemoteObjectStoreGateway (e.g. CloudBackendAPI)
            catalog: LocalCatalogGateway (e.g. CatalogManager)
            http_session: Session used to download sidecars
            max_workers: Worker pool size for network fan-out
            timeout: Sidecar download timeout in seconds
        """
        self.remote = remote_store
        self.catalog = catalog
        self._owns_http = http_session is None
        self.http = http_session or requests.Session()
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self.applier = MetadataApplier(catalog)
        self.matcher = SessionMatcher(catalog)
        self._run_lock = threading.Lock()

    def close(self):
        """Close the sidecar download session if this engine created it."""
        if self._owns_http:
            self.http.close()
            logger.debug("Sidecar download session closed")

    # ==================== Reconciliation pass ====================

    def run(self, prefix: Optional[str] = None, context: Optional[ReconciliationContext] = None,
            progress_callback: Optional[Callable] = None) -> SyncReport:
        """
        Run one reconciliation pass.

        Args:
            prefix: Key prefix to reconcile (defaults to the context's prefix)
            context: Caller-owned pass context; a new one is used if None
            progress_callback: Optional callback for progress updates
                             Called with (message: str, current: int, total: int)

        Returns:
            SyncReport (status NOT_AUTHENTICATED / LISTING_FAILED when the
            pass aborted before touching the catalog, CANCELLED when the
            context was cancelled between steps)

        A context may be reused across passes; its session sidecar cache
        is cleared at the start of each pass. A cancelled context stays
        cancelled, so every later pass with it ends as CANCELLED.
        """
        if context is None:
            context = ReconciliationContext()
        if prefix:
            context.prefix = prefix

        with self._run_lock:
            report = SyncReport()
            logger.info(f"Starting reconciliation pass for '{context.prefix}'")
            try:
                self._run_pass(context, report, progress_callback)
            except CrownSyncCancelledError as e:
                report.status = SyncStatus.CANCELLED
                logger.warning(f"Reconciliation pass cancelled: {e}")

            logger.info(f"Reconciliation pass finished: {report.summary()}")
            return report

    def _run_pass(self, context: ReconciliationContext, report: SyncReport,
                  progress_callback: Optional[Callable]):
        def progress(message: str, step: int):
            logger.debug(f"Step {step}/{TOTAL_STEPS}: {message}")
            if progress_callback:
                progress_callback(message, step, TOTAL_STEPS)

        if not self.remote.is_authenticated:
            logger.error("Reconciliation aborted: not authenticated")
            report.status = SyncStatus.NOT_AUTHENTICATED
            return

        context.session_metadata.clear()
        lister = RemoteCatalogLister(self.remote, context.root_prefix)
        builder = RemoteViewBuilder(context.root_prefix)
        loader = MetadataSidecarLoader(
            self.remote, self.http,
            signed_url_minutes=context.signed_url_minutes,
            timeout=self.timeout,
            max_workers=self.max_workers
        )

        # Step 1: List
        progress("Listing remote library...", 1)
        try:
            descriptors = lister.list(context.prefix, context.max_items)
        except CrownSyncAuthError as e:
            logger.error(f"Reconciliation aborted: {e}")
            report.status = SyncStatus.NOT_AUTHENTICATED
            return
        except CrownSyncTransportError as e:
            logger.error(f"Reconciliation aborted, listing failed: {e}")
            report.status = SyncStatus.LISTING_FAILED
            report.add_error(f"Listing failed: {e}", failed=False)
            return
        self._check_cancelled(context)

        # Step 2: Partition
        progress("Classifying remote objects...", 2)
        catalog = lister.classify(descriptors)

        # Step 3: Session sidecars
        progress("Loading session metadata...", 3)
        loader.load_sessions(catalog.session_metadata, context)
        self._check_cancelled(context)

        # Step 4: Orphans (completes before any import)
        progress("Removing orphaned clips...", 4)
        self._remove_orphans(catalog, context, report)
        self._check_cancelled(context)

        # Step 5: Views
        progress("Building remote views...", 5)
        listed_videos = catalog.video_keys
        metadata_objects = [
            obj for obj in catalog.video_metadata.values()
            if video_key(obj.session_id, obj.video_id).lower() in listed_videos
        ]
        video_sidecars = loader.load_videos(metadata_objects)
        local_sessions = {session.id: session for session in self.catalog.get_all_sessions()}
        video_views = builder.build_video_views(
            catalog, video_sidecars, self.catalog.get_all_video_clips(), local_sessions, context
        )
        session_views = builder.build_session_views(video_views, local_sessions, context)
        report.remote_videos = video_views
        report.remote_sessions = session_views
        self._check_cancelled(context)

        # Step 6: Import
        progress("Importing new remote videos...", 6)
        imported = self._import_unlinked(video_views, session_views, context, report)
        self._check_cancelled(context)

        # Step 7: Session fields
        progress("Updating session details...", 7)
        self._push_session_fields(video_views, context, report)
        self._check_cancelled(context)

        # Step 8: Conditional refresh
        progress("Refreshing linked videos...", 8)
        self._refresh_linked(video_views, imported, report)

    @staticmethod
    def _check_cancelled(context: ReconciliationContext):
        if context.cancelled:
            raise CrownSyncCancelledError("Pass cancelled by caller")

    # ==================== Step 4: orphans ====================

    def _remove_orphans(self, catalog: RemoteCatalog, context: ReconciliationContext, report: SyncReport):
        """
        Delete remote-origin clips whose video is no longer listed.

        Only clips under the listed prefix are candidates, so a pass over
        one session never prunes clips of another.
        """
        remote_keys = catalog.video_keys
        listed_prefix = normalize_key(context.prefix, context.root_prefix).lower()
        touched_sessions: Set[int] = set()

        for clip in self.catalog.get_all_video_clips():
            if not clip.is_remote:
                continue
            key = comparison_key(clip.clip_path, context.root_prefix)
            if not key or not key.startswith(listed_prefix) or key in remote_keys:
                continue

            try:
                self._remove_local_clip(clip)
            except Exception as e:
                logger.error(f"Failed to remove orphaned clip {clip.id} ({clip.clip_path}): {e}")
                report.add_error(f"Orphan removal failed for {clip.clip_path}: {e}")
                continue

            logger.info(f"Removed orphaned clip {clip.id} ({clip.clip_path})")
            report.orphaned += 1
            touched_sessions.add(clip.session_id)

        report.sessions_removed += self._remove_empty_sessions(touched_sessions)

    def _remove_local_clip(self, clip: VideoClip):
        if clip.local_thumbnail_path:
            thumbnail = Path(clip.local_thumbnail_path)
            try:
                if thumbnail.exists():
                    thumbnail.unlink()
            except OSError as e:
                logger.warning(f"Could not delete thumbnail {thumbnail}: {e}")

        self.catalog.delete_video_clip(clip.id)

    def _remove_empty_sessions(self, session_ids: Set[int]) -> int:
        removed = 0
        for session_id in sorted(session_ids):
            if self.catalog.get_video_clips_by_session(session_id):
                continue
            if self.catalog.delete_session(session_id):
                logger.info(f"Removed empty session {session_id}")
                removed += 1
        return removed

    # ==================== Step 6: import ====================

    def _import_unlinked(self, video_views: List[RemoteVideoView], session_views: List[RemoteSessionView],
                         context: ReconciliationContext, report: SyncReport) -> Set[str]:
        """
        Create local clips for unlinked remote videos.

        Returns:
            Case-folded keys of the videos imported in this pass
        """
        sessions_by_id: Dict[int, RemoteSessionView] = {view.session_id: view for view in session_views}
        linked_sessions = {view.session_id for view in video_views if view.is_linked}
        imported: Set[str] = set()
        self.matcher.reset()

        for view in video_views:
            if view.is_linked:
                continue
            if context.import_scope == IMPORT_SCOPE_LINKED_SESSIONS and view.session_id not in linked_sessions:
                continue

            try:
                clip = self._import_video(view, sessions_by_id[view.session_id], report)
            except Exception as e:
                logger.error(f"Failed to import {view.key}: {e}")
                report.add_error(f"Import failed for {view.key}: {e}")
                continue

            view.linked_local = clip
            imported.add(view.key.lower())
            report.imported += 1

        return imported

    def _import_video(self, view: RemoteVideoView, session_view: RemoteSessionView, report: SyncReport) -> VideoClip:
        session, created = self.matcher.resolve_or_create_session(
            view.session_id,
            session_view.title,
            session_view.session_date_utc,
            place=session_view.place,
            coach=session_view.coach,
            session_type=session_view.session_type
        )
        if created:
            report.sessions_created += 1

        creation_date = view.last_modified_utc
        if view.metadata is not None and view.metadata.video is not None and view.metadata.video.creation_date:
            creation_date = view.metadata.video.creation_date

        clip = VideoClip(
            session_id=session.id,
            athlete_id=0,
            section=view.section,
            creation_date=creation_date,
            clip_path=view.key,
            local_clip_path=None,
            thumbnail_path=None,
            local_thumbnail_path=None,
            comparison_name=None,
            clip_duration=0.0,
            clip_size=view.size,
            source=SOURCE_REMOTE,
            is_synced=True,
            last_sync_utc=0,
            has_timing=False
        )
        clip = self.catalog.insert_video_clip(clip)
        logger.info(f"Imported {view.key} as clip {clip.id} in session {session.id}")

        if view.metadata is not None:
            watermark = view.metadata_descriptor.last_modified_utc if view.metadata_descriptor else None
            clip = self.applier.apply(clip, view.metadata, replace_inputs=False, watermark=watermark)

        return clip

    # ==================== Step 7: session fields ====================

    def _push_session_fields(self, video_views: List[RemoteVideoView], context: ReconciliationContext,
                             report: SyncReport):
        targets: Dict[int, object] = {}
        for view in video_views:
            if not view.is_linked:
                continue
            sidecar = context.session_sidecar(view.session_id)
            if sidecar is not None:
                targets.setdefault(view.linked_local.session_id, sidecar)

        for local_session_id, sidecar in targets.items():
            session = self.catalog.get_session_by_id(local_session_id)
            if session is None:
                continue
            if not apply_session_sidecar(session, sidecar):
                continue

            try:
                self.catalog.save_session(session)
            except Exception as e:
                logger.error(f"Failed to update session {local_session_id}: {e}")
                report.add_error(f"Session update failed for {local_session_id}: {e}")
                continue

            logger.info(f"Updated session {local_session_id} from remote metadata")
            report.sessions_updated += 1

    # ==================== Step 8: refresh ====================

    def _refresh_linked(self, video_views: List[RemoteVideoView], imported: Set[str], report: SyncReport):
        for view in video_views:
            if not view.is_linked or view.key.lower() in imported:
                continue

            descriptor = view.metadata_descriptor
            if descriptor is None:
                continue

            clip = view.linked_local
            if descriptor.last_modified_utc <= (clip.last_sync_utc or 0):
                continue

            if view.metadata is None:
                logger.warning(f"Sidecar for {view.key} is newer than clip {clip.id} but could not be loaded")
                report.add_error(f"Metadata unavailable for {view.key}")
                continue

            try:
                view.linked_local = self.applier.apply(
                    clip, view.metadata, replace_inputs=True, watermark=descriptor.last_modified_utc
                )
            except Exception as e:
                logger.error(f"Failed to refresh clip {clip.id} from {view.key}: {e}")
                report.add_error(f"Refresh failed for {view.key}: {e}")
                continue

            logger.info(f"Refreshed clip {clip.id} from {view.key}")
            report.updated += 1

    # ==================== Remote session deletion ====================

    def delete_remote_session(self, session_id: int, can_write: bool,
                              context: Optional[ReconciliationContext] = None) -> DeletionReport:
        """
        Delete every object of a session from the remote store.

        Local clips are removed only for keys whose remote deletion
        succeeded; the local session is removed once it has no clips.

        Args:
            session_id: Remote session id
            can_write: Pre-checked write permission of the current user
            context: Optional context supplying root prefix and page size

        Returns:
            DeletionReport

        Raises:
            CrownSyncPermissionError: If can_write is False
            CrownSyncAuthError: If the store is not authenticated
        """
        if not can_write:
            raise CrownSyncPermissionError("No permission to delete sessions from the shared library")
        if session_id <= 0:
            raise ValueError(f"Invalid session id: {session_id}")
        if context is None:
            context = ReconciliationContext()

        with self._run_lock:
            report = DeletionReport(session_id=session_id)
            prefix = session_prefix(session_id)
            logger.info(f"Deleting remote session {session_id} ({prefix})")

            lister = RemoteCatalogLister(self.remote, context.root_prefix)
            try:
                descriptors = lister.list(prefix, context.max_items)
            except CrownSyncTransportError as e:
                logger.error(f"Could not list {prefix}: {e}")
                report.error = str(e)
                return report

            keys = [normalize_key(d.key, context.root_prefix) for d in descriptors if not d.is_folder]
            for key, deleted in self._delete_keys(keys):
                if deleted:
                    report.deleted_keys.append(key)
                else:
                    report.failed_keys.append(key)

            deleted_folded = {key.lower() for key in report.deleted_keys}
            touched_sessions: Set[int] = {session_id}
            for clip in self.catalog.get_all_video_clips():
                if comparison_key(clip.clip_path, context.root_prefix) not in deleted_folded:
                    continue
                self._remove_local_clip(clip)
                report.local_clips_removed += 1
                touched_sessions.add(clip.session_id)

            report.local_session_removed = self._remove_empty_sessions(touched_sessions) > 0

            if report.partial:
                logger.warning(f"Session {session_id}: {len(report.failed_keys)} object(s) could not be deleted")
            logger.info(
                f"Session {session_id}: deleted {len(report.deleted_keys)} remote object(s), "
                f"removed {report.local_clips_removed} local clip(s)"
            )
            return report

    def _delete_keys(self, keys: List[str]):
        """Delete keys with bounded concurrency. Returns (key, succeeded) pairs in input order."""
        if not keys:
            return []

        def delete_one(key: str) -> bool:
            try:
                return bool(self.remote.delete_file(key))
            except CrownSyncAPIError as e:
                logger.warning(f"Failed to delete {key}: {e}")
                return False

        workers = min(self.max_workers, len(keys))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="delete") as executor:
            return list(zip(keys, executor.map(delete_one, keys)))
