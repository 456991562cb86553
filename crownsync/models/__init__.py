"""
CrownSync - Models Package

Contains local catalog models, sidecar schemas, remote views and reports.

Author: CrownSync Project
"""

from .remote import (
    RemoteObjectDescriptor,
    RemoteFileListing,
    ClassifiedObject,
    RemoteCatalog,
    TagView,
    RemoteVideoView,
    RemoteSessionView
)
from .sidecars import SessionMetadataSidecar, VideoMetadataSidecar
from .sync_report import SyncStatus, SyncReport, DeletionReport
from .reconciliation_context import (
    ReconciliationContext,
    IMPORT_SCOPE_ALL,
    IMPORT_SCOPE_LINKED_SESSIONS
)

__all__ = [
    'RemoteObjectDescriptor',
    'RemoteFileListing',
    'ClassifiedObject',
    'RemoteCatalog',
    'TagView',
    'RemoteVideoView',
    'RemoteSessionView',
    'SessionMetadataSidecar',
    'VideoMetadataSidecar',
    'SyncStatus',
    'SyncReport',
    'DeletionReport',
    'ReconciliationContext',
    'IMPORT_SCOPE_ALL',
    'IMPORT_SCOPE_LINKED_SESSIONS'
]
