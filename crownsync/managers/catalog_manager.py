"""
CrownSync - Catalog Manager

SQLite-backed implementation of the local catalog gateway.
Manages the database connection, schema creation and CRUD operations.

Author: CrownSync Project
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from crownsync.gateways import LocalCatalogGateway
from crownsync.models.database import (
    Base, Session, VideoClip, Athlete, Tag, EventTagDefinition,
    EventInput, TimingEvent
)

# Configure logging
logger = logging.getLogger(__name__)


class CatalogManager(LocalCatalogGateway):
    """
    Manages the local catalog database.

    Every call runs in its own short-lived SQLAlchemy session; returned
    objects are detached and keep their loaded attributes.
    """

    def __init__(self, db_path: str = "crownsync.db"):
        """
        Initialize catalog manager

        Args:
            db_path: Path to SQLite database file (":memory:" for a
                     throwaway in-process catalog)
        """
        self.db_path = db_path

        if db_path != ":memory:":
            # Ensure database directory exists
            db_dir = Path(db_path).parent
            if db_dir and str(db_dir) != '.':
                db_dir.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(f"sqlite:///{db_path}", echo=False)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def initialize_database(self):
        """Create all catalog tables if they don't exist."""
        Base.metadata.create_all(bind=self.engine)
        logger.debug(f"Catalog schema ready at {self.db_path}")

    def close(self):
        """Dispose of the connection pool."""
        self.engine.dispose()

    @contextmanager
    def _session(self):
        """Yield a session that commits on success and rolls back on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ==================== Sessions ====================

    def get_all_sessions(self) -> List[Session]:
        with self._session() as db:
            return db.query(Session).order_by(Session.id).all()

    def get_session_by_id(self, session_id: int) -> Optional[Session]:
        with self._session() as db:
            return db.get(Session, session_id)

    def insert_session_with_id(self, session: Session) -> Session:
        """
        Insert a session keeping its caller-assigned id.

        Args:
            session: Session with id already set

        Returns:
            The inserted session

        Raises:
            ValueError: If the session has no id
        """
        if not session.id:
            raise ValueError("insert_session_with_id requires a session id")

        with self._session() as db:
            db.add(session)
        logger.debug(f"Inserted session {session.id} ({session.name})")
        return session

    def save_session(self, session: Session) -> Session:
        with self._session() as db:
            merged = db.merge(session)
        return merged

    def delete_session(self, session_id: int) -> bool:
        with self._session() as db:
            deleted = db.query(Session).filter(Session.id == session_id).delete()
        return deleted > 0

    # ==================== Video clips ====================

    def get_all_video_clips(self) -> List[VideoClip]:
        with self._session() as db:
            return db.query(VideoClip).order_by(VideoClip.id).all()

    def get_video_clips_by_session(self, session_id: int) -> List[VideoClip]:
        with self._session() as db:
            return db.query(VideoClip).filter(VideoClip.session_id == session_id).order_by(VideoClip.id).all()

    def insert_video_clip(self, clip: VideoClip) -> VideoClip:
        with self._session() as db:
            db.add(clip)
        logger.debug(f"Inserted video clip {clip.id} -> {clip.clip_path}")
        return clip

    def update_video_clip(self, clip: VideoClip) -> VideoClip:
        with self._session() as db:
            merged = db.merge(clip)
        return merged

    def delete_video_clip(self, clip_id: int) -> bool:
        """
        Delete a clip together with its event inputs and timing events.

        Args:
            clip_id: Local clip id

        Returns:
            True if the clip row existed
        """
        with self._session() as db:
            db.query(EventInput).filter(EventInput.video_id == clip_id).delete()
            db.query(TimingEvent).filter(TimingEvent.video_id == clip_id).delete()
            deleted = db.query(VideoClip).filter(VideoClip.id == clip_id).delete()
        return deleted > 0

    # ==================== Tags and events ====================

    def save_tag(self, tag: Tag) -> Tag:
        with self._session() as db:
            merged = db.merge(tag)
        return merged

    def insert_event_tag(self, definition: EventTagDefinition) -> EventTagDefinition:
        with self._session() as db:
            db.add(definition)
        return definition

    def get_event_tag_by_id(self, event_tag_id: int) -> Optional[EventTagDefinition]:
        with self._session() as db:
            return db.get(EventTagDefinition, event_tag_id)

    def save_event_input(self, event_input: EventInput) -> EventInput:
        with self._session() as db:
            if event_input.id:
                return db.merge(event_input)
            db.add(event_input)
        return event_input

    def get_event_inputs_by_video(self, video_id: int) -> List[EventInput]:
        with self._session() as db:
            return db.query(EventInput).filter(EventInput.video_id == video_id).order_by(EventInput.id).all()

    def delete_event_inputs_by_video(self, video_id: int) -> int:
        with self._session() as db:
            return db.query(EventInput).filter(EventInput.video_id == video_id).delete()

    def insert_timing_events(self, events: List[TimingEvent]) -> int:
        if not events:
            return 0
        with self._session() as db:
            db.add_all(events)
        return len(events)

    def get_timing_events_by_video(self, video_id: int) -> List[TimingEvent]:
        with self._session() as db:
            return db.query(TimingEvent).filter(TimingEvent.video_id == video_id).order_by(TimingEvent.id).all()

    def delete_timing_events_by_video(self, video_id: int) -> int:
        with self._session() as db:
            return db.query(TimingEvent).filter(TimingEvent.video_id == video_id).delete()

    # ==================== Athletes ====================

    def get_athlete_by_id(self, athlete_id: int) -> Optional[Athlete]:
        with self._session() as db:
            return db.get(Athlete, athlete_id)

    def save_athlete(self, athlete: Athlete) -> Athlete:
        with self._session() as db:
            merged = db.merge(athlete)
        return merged
