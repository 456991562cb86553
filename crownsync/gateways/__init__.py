"""
CrownSync - Gateways Package

Contracts for the two collaborators the reconciliation engine talks to:
the remote object store and the local catalog.

Author: CrownSync Project
"""

from .remote_store import RemoteObjectStoreGateway
from .local_catalog import LocalCatalogGateway

__all__ = [
    'RemoteObjectStoreGateway',
    'LocalCatalogGateway'
]
