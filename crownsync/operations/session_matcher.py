"""
CrownSync - Session Matcher Module

Finds the local session a remote video belongs to, or creates one that
keeps the remote session id.

Author: CrownSync Project
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from crownsync.gateways import LocalCatalogGateway
from crownsync.models.database import Session

# Configure logging
logger = logging.getLogger(__name__)


def utc_day(epoch_seconds: Optional[int]):
    """Calendar day (UTC) of an epoch timestamp, or None when unset."""
    if not epoch_seconds or epoch_seconds <= 0:
        return None
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).date()


def _folded(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def is_matching_session(session: Session, session_name: str,
                        session_date_utc: Optional[int], place: Optional[str]) -> bool:
    """
    Check whether a local session is "the same" as a remote one.

    Names must match (trimmed, case-insensitive). Dates are compared by
    UTC day only when both sides have one. The place must match when the
    remote side names one.
    """
    local_name = session.name if session.name is not None else session.display_name
    if _folded(local_name) != _folded(session_name):
        return False

    local_day = utc_day(session.date_utc)
    remote_day = utc_day(session_date_utc)
    if local_day is not None and remote_day is not None and local_day != remote_day:
        return False

    if place and place.strip():
        if _folded(place) != _folded(session.place):
            return False

    return True


class SessionMatcher:
    """
    Resolves or creates local sessions for imported videos.

    Lookup order:
    1. Local session with the remote id
    2. Local session with the same name, day and place
    3. New local session keeping the remote id
    """

    def __init__(self, catalog: LocalCatalogGateway):
        self.catalog = catalog
        self._sessions = None

    def reset(self):
        """Drop the cached session list (call at the start of each pass)."""
        self._sessions = None

    def _all_sessions(self):
        if self._sessions is None:
            self._sessions = list(self.catalog.get_all_sessions())
        return self._sessions

    def find_matching_session(self, session_name: str, session_date_utc: Optional[int],
                              place: Optional[str]) -> Optional[Session]:
        for session in self._all_sessions():
            if is_matching_session(session, session_name, session_date_utc, place):
                return session
        return None

    def resolve_or_create_session(self, remote_session_id: int, session_name: str,
                                  session_date_utc: Optional[int], place: Optional[str] = None,
                                  coach: Optional[str] = None,
                                  session_type: Optional[str] = None) -> Tuple[Session, bool]:
        """
        Resolve the local session for a remote session id.

        Args:
            remote_session_id: Session id parsed from the remote key
            session_name: Resolved remote session name
            session_date_utc: Resolved remote session date (epoch seconds)
            place: Remote place, if any
            coach: Remote coach, used only when creating
            session_type: Remote session type, used only when creating

        Returns:
            Tuple of (session, created)
        """
        existing = self.catalog.get_session_by_id(remote_session_id)
        if existing is not None:
            return existing, False

        matched = self.find_matching_session(session_name, session_date_utc, place)
        if matched is not None:
            logger.info(f"Remote session {remote_session_id} matched local session {matched.id} ('{session_name}')")
            return matched, False

        session = Session(
            id=remote_session_id,
            name=session_name,
            place=place,
            coach=coach,
            session_type=session_type,
            date_utc=session_date_utc or 0,
            participants=""
        )
        session = self.catalog.insert_session_with_id(session)
        self._all_sessions().append(session)
        logger.info(f"Created local session {remote_session_id} ('{session_name}')")
        return session, True


def apply_session_sidecar(session: Session, sidecar) -> bool:
    """
    Copy non-empty session sidecar fields onto a local session.

    Args:
        session: Local session (modified in place)
        sidecar: SessionMetadataSidecar

    Returns:
        True if any field changed
    """
    changed = False

    for attr, value in (
        ("name", sidecar.name),
        ("place", sidecar.clean_place),
        ("coach", sidecar.clean_coach),
        ("session_type", sidecar.clean_session_type),
    ):
        if value and getattr(session, attr) != value:
            setattr(session, attr, value)
            changed = True

    date_utc = sidecar.resolved_date_utc()
    if date_utc and date_utc > 0 and session.date_utc != date_utc:
        session.date_utc = date_utc
        changed = True

    return changed
