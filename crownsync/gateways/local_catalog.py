"""
CrownSync - Local Catalog Gateway

Contract for the CRUD operations the reconciliation engine issues
against the local catalog.

Author: CrownSync Project
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class LocalCatalogGateway(ABC):
    """
    Local catalog consumed by the reconciliation engine.

    Objects returned are detached snapshots; callers mutate them and hand
    them back to the save/update methods. The gateway only has to be safe
    for sequential use from one logical caller.
    """

    # ==================== Sessions ====================

    @abstractmethod
    def get_all_sessions(self) -> List:
        """All local sessions."""

    @abstractmethod
    def get_session_by_id(self, session_id: int) -> Optional[object]:
        """Session with the given id, or None."""

    @abstractmethod
    def insert_session_with_id(self, session) -> object:
        """Insert a session keeping the id the caller assigned."""

    @abstractmethod
    def save_session(self, session) -> object:
        """Persist changes to an existing session."""

    @abstractmethod
    def delete_session(self, session_id: int) -> bool:
        """Delete a session row. Returns False when it did not exist."""

    # ==================== Video clips ====================

    @abstractmethod
    def get_all_video_clips(self) -> List:
        """All local video clips."""

    @abstractmethod
    def get_video_clips_by_session(self, session_id: int) -> List:
        """Clips belonging to a session."""

    @abstractmethod
    def insert_video_clip(self, clip) -> object:
        """Insert a clip; the returned object carries the assigned id."""

    @abstractmethod
    def update_video_clip(self, clip) -> object:
        """Persist changes to an existing clip."""

    @abstractmethod
    def delete_video_clip(self, clip_id: int) -> bool:
        """Delete a clip with its event inputs and timing events."""

    # ==================== Tags and events ====================

    @abstractmethod
    def save_tag(self, tag) -> object:
        """Insert or update a tag by id."""

    @abstractmethod
    def insert_event_tag(self, definition) -> object:
        """Insert an event tag definition."""

    @abstractmethod
    def get_event_tag_by_id(self, event_tag_id: int) -> Optional[object]:
        """Event tag definition with the given id, or None."""

    @abstractmethod
    def save_event_input(self, event_input) -> object:
        """Insert (id 0/None) or update an event-input row."""

    @abstractmethod
    def get_event_inputs_by_video(self, video_id: int) -> List:
        """Event-input rows of a clip."""

    @abstractmethod
    def delete_event_inputs_by_video(self, video_id: int) -> int:
        """Delete all event-input rows of a clip. Returns rows deleted."""

    @abstractmethod
    def insert_timing_events(self, events: List) -> int:
        """Insert timing events. Returns rows inserted."""

    @abstractmethod
    def get_timing_events_by_video(self, video_id: int) -> List:
        """Timing events of a clip."""

    @abstractmethod
    def delete_timing_events_by_video(self, video_id: int) -> int:
        """Delete all timing events of a clip. Returns rows deleted."""

    # ==================== Athletes ====================

    @abstractmethod
    def get_athlete_by_id(self, athlete_id: int) -> Optional[object]:
        """Athlete with the given id, or None."""

    @abstractmethod
    def save_athlete(self, athlete) -> object:
        """Insert or update an athlete by id."""
