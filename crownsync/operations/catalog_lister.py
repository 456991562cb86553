"""
CrownSync - Remote Catalog Lister Module

Walks a key prefix of the remote store (following continuation pages)
and partitions the objects by the key grammar.

Author: CrownSync Project
"""

import logging
from typing import List, Optional

from crownsync.gateways import RemoteObjectStoreGateway
from crownsync.models.remote import RemoteObjectDescriptor, ClassifiedObject, RemoteCatalog
from crownsync.remote_paths import DEFAULT_ROOT_PREFIX, RemoteKeyKind, normalize_key, parse_remote_key

# Configure logging
logger = logging.getLogger(__name__)


class RemoteCatalogLister:
    """
    Lists and classifies remote objects.

    Responsibilities:
    - Fetch every page under a prefix (never truncate at max_items)
    - Drop folders and keys outside the grammar
    - Partition videos, per-video sidecars, session sidecars and thumbnails
    """

    def __init__(self, remote_store: RemoteObjectStoreGateway, root_prefix: str = DEFAULT_ROOT_PREFIX):
        """
        Initialize lister.

        Args:
            remote_store: Gateway used for listing calls
            root_prefix: Historical root prefix stripped from every key
        """
        self.remote = remote_store
        self.root_prefix = root_prefix

    def list(self, prefix: str, max_items: int = 1000) -> List[RemoteObjectDescriptor]:
        """
        List all objects under a prefix.

        Args:
            prefix: Key prefix (e.g. "sessions/")
            max_items: Page size requested from the gateway

        Returns:
            Every descriptor across all pages, in listing order

        Raises:
            CrownSyncAuthError: If the gateway is not authenticated
            CrownSyncTransportError: If any page fails
        """
        descriptors: List[RemoteObjectDescriptor] = []
        token: Optional[str] = None
        seen_tokens = set()
        page = 0

        while True:
            listing = self.remote.list_files(prefix, max_items, token)
            page += 1
            descriptors.extend(listing.files)
            logger.debug(f"Page {page} under '{prefix}': {len(listing.files)} objects")

            if not listing.has_more:
                break
            if not listing.continuation_token or listing.continuation_token in seen_tokens:
                logger.warning(f"Listing under '{prefix}' reported more pages without a new continuation token")
                break

            token = listing.continuation_token
            seen_tokens.add(token)

        logger.info(f"Listed {len(descriptors)} remote objects under '{prefix}' ({page} page(s))")
        return descriptors

    def classify(self, descriptors: List[RemoteObjectDescriptor]) -> RemoteCatalog:
        """
        Partition descriptors by kind.

        Keys that do not match the grammar are counted in
        RemoteCatalog.skipped and otherwise ignored. A video key listed
        twice (e.g. with and without the root prefix) is kept once.

        Args:
            descriptors: Result of list()

        Returns:
            RemoteCatalog
        """
        catalog = RemoteCatalog()
        video_keys = set()

        for descriptor in descriptors:
            if descriptor.is_folder:
                continue

            parsed = parse_remote_key(descriptor.key, self.root_prefix)
            if parsed is None:
                catalog.skipped += 1
                continue

            key = normalize_key(descriptor.key, self.root_prefix)
            obj = ClassifiedObject(
                descriptor=descriptor,
                kind=parsed.kind,
                key=key,
                session_id=parsed.session_id,
                video_id=parsed.video_id
            )
            folded = key.lower()

            if parsed.kind == RemoteKeyKind.VIDEO:
                if folded in video_keys:
                    continue
                video_keys.add(folded)
                catalog.videos.append(obj)
            elif parsed.kind == RemoteKeyKind.VIDEO_METADATA:
                catalog.video_metadata.setdefault(folded, obj)
            elif parsed.kind == RemoteKeyKind.SESSION_METADATA:
                catalog.session_metadata.append(obj)
            elif parsed.kind == RemoteKeyKind.THUMBNAIL:
                catalog.thumbnails.setdefault(folded, obj)

        logger.info(
            f"Classified listing: {len(catalog.videos)} videos, "
            f"{len(catalog.video_metadata)} video sidecars, "
            f"{len(catalog.session_metadata)} session sidecars, "
            f"{len(catalog.thumbnails)} thumbnails ({catalog.skipped} skipped)"
        )
        return catalog
