"""
CrownSync - Operations Package

This package contains the reconciliation pipeline: listing, sidecar
loading, view building, session matching and the engine itself.
"""

from .catalog_lister import RemoteCatalogLister
from .sidecar_loader import MetadataSidecarLoader
from .view_builder import RemoteViewBuilder
from .session_matcher import SessionMatcher
from .metadata_applier import MetadataApplier
from .reconciliation_engine import ReconciliationEngine

__all__ = [
    'RemoteCatalogLister',
    'MetadataSidecarLoader',
    'RemoteViewBuilder',
    'SessionMatcher',
    'MetadataApplier',
    'ReconciliationEngine'
]
