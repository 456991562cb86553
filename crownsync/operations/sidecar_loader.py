"""
CrownSync - Metadata Sidecar Loader Module

Fetches JSON sidecars through short-lived signed URLs and decodes them.
A sidecar that cannot be fetched or parsed is reported as absent.

Author: CrownSync Project
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, List

import requests

from crownsync.exceptions import CrownSyncAPIError, CrownSyncParseError
from crownsync.gateways import RemoteObjectStoreGateway
from crownsync.models.remote import ClassifiedObject
from crownsync.models.reconciliation_context import ReconciliationContext
from crownsync.models.sidecars import SessionMetadataSidecar, VideoMetadataSidecar
from crownsync.remote_paths import parse_remote_key

# Configure logging
logger = logging.getLogger(__name__)


class MetadataSidecarLoader:
    """
    Loads session and video sidecars.

    Single loads run on the calling thread; the load_many helpers fan
    out over a bounded thread pool and return once every load finished.
    """

    def __init__(self, remote_store: RemoteObjectStoreGateway,
                 http_session: Optional[requests.Session] = None,
                 signed_url_minutes: int = 10,
                 timeout: int = 30,
                 max_workers: int = 4):
        """
        Initialize sidecar loader.

        Args:
            remote_store: Gateway that issues signed URLs
            http_session: Session used to GET signed URLs (a new one if None)
            signed_url_minutes: Lifetime requested for each signed URL
            timeout: Download timeout in seconds
            max_workers: Upper bound on concurrent downloads
        """
        self.remote = remote_store
        self._owns_http = http_session is None
        self.http = http_session or requests.Session()
        self.signed_url_minutes = signed_url_minutes
        self.timeout = timeout
        self.max_workers = max(1, max_workers)

    def close(self):
        """Close the download session if this loader created it."""
        if self._owns_http:
            self.http.close()

    def _fetch_text(self, key: str) -> Optional[str]:
        """Download a sidecar body, or None on any transport failure."""
        try:
            url = self.remote.get_signed_download_url(key, self.signed_url_minutes)
        except CrownSyncAPIError as e:
            logger.warning(f"Could not sign sidecar {key}: {e}")
            return None

        try:
            response = self.http.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Could not download sidecar {key}: {e}")
            return None

        return response.text

    def load_session(self, key: str) -> Optional[SessionMetadataSidecar]:
        """
        Load a session sidecar.

        A sidecar without a positive sessionId takes the id from its key.

        Args:
            key: sessions/{id}/session.json

        Returns:
            SessionMetadataSidecar, or None when missing or malformed
        """
        text = self._fetch_text(key)
        if text is None:
            return None

        try:
            sidecar = SessionMetadataSidecar.from_json(key, text)
        except CrownSyncParseError as e:
            logger.warning(f"Ignoring malformed session sidecar {e}")
            return None

        if sidecar.session_id <= 0:
            parsed = parse_remote_key(key)
            if parsed is not None:
                sidecar = sidecar.model_copy(update={"session_id": parsed.session_id})
        return sidecar

    def load_video(self, key: str) -> Optional[VideoMetadataSidecar]:
        """
        Load a per-video sidecar.

        Args:
            key: sessions/{sid}/metadata/{vid}.json

        Returns:
            VideoMetadataSidecar, or None when missing or malformed
        """
        text = self._fetch_text(key)
        if text is None:
            return None

        try:
            return VideoMetadataSidecar.from_json(key, text)
        except CrownSyncParseError as e:
            logger.warning(f"Ignoring malformed video sidecar {e}")
            return None

    def load_sessions(self, objects: List[ClassifiedObject], context: ReconciliationContext) -> Dict[int, SessionMetadataSidecar]:
        """
        Fill the context's session sidecar cache.

        Only the first sidecar listed for a session id is loaded, and ids
        already cached in the context are not fetched again.

        Args:
            objects: Session sidecar objects from the listing
            context: Pass context holding the cache

        Returns:
            The context's session_metadata mapping
        """
        pending: Dict[int, ClassifiedObject] = {}
        for obj in objects:
            if obj.session_id in context.session_metadata or obj.session_id in pending:
                continue
            pending[obj.session_id] = obj

        if not pending:
            return context.session_metadata

        logger.info(f"Loading {len(pending)} session sidecar(s)")
        loaded = self._load_many(self.load_session, [obj.key for obj in pending.values()])

        for session_id, obj in pending.items():
            sidecar = loaded.get(obj.key)
            if sidecar is not None:
                context.session_metadata[session_id] = sidecar

        return context.session_metadata

    def load_videos(self, objects: List[ClassifiedObject]) -> Dict[str, VideoMetadataSidecar]:
        """
        Load several per-video sidecars.

        Args:
            objects: Video sidecar objects from the listing

        Returns:
            Dict of case-folded key to sidecar (absent sidecars omitted)
        """
        if not objects:
            return {}

        logger.info(f"Loading {len(objects)} video sidecar(s)")
        loaded = self._load_many(self.load_video, [obj.key for obj in objects])
        return {key.lower(): sidecar for key, sidecar in loaded.items() if sidecar is not None}

    def _load_many(self, loader, keys: List[str]) -> Dict[str, object]:
        workers = min(self.max_workers, len(keys))
        if workers <= 1:
            return {key: loader(key) for key in keys}

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sidecar") as executor:
            results = executor.map(loader, keys)
            return dict(zip(keys, results))
