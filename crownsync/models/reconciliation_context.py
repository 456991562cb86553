"""
CrownSync - Reconciliation Context Model

Caller-owned state threaded through one reconciliation pass.

Author: CrownSync Project
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from crownsync.remote_paths import DEFAULT_ROOT_PREFIX, SESSIONS_ROOT


IMPORT_SCOPE_ALL = "all"
IMPORT_SCOPE_LINKED_SESSIONS = "linked_sessions"


@dataclass
class ReconciliationContext:
    """
    Settings and caches threaded through reconciliation passes.

    The session sidecar cache holds the sidecars of the current pass only;
    ReconciliationEngine.run clears it before loading.
    """
    prefix: str = SESSIONS_ROOT
    root_prefix: str = DEFAULT_ROOT_PREFIX
    max_items: int = 1000
    signed_url_minutes: int = 10
    import_scope: str = IMPORT_SCOPE_ALL
    cancel_event: threading.Event = field(default_factory=threading.Event)
    session_metadata: Dict[int, object] = field(default_factory=dict)

    def cancel(self):
        """Stop the running pass at its next step. The context stays cancelled."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def session_sidecar(self, session_id: int) -> Optional[object]:
        return self.session_metadata.get(session_id)
