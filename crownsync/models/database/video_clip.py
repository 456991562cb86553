"""
CrownSync - VideoClip Database Model

A video clip in the local catalog, either recorded locally or linked to
an object in the remote store.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, Index

from crownsync.models.database.base import Base


# Source value for clips whose lifecycle is driven by reconciliation
SOURCE_REMOTE = "remote"
SOURCE_LOCAL = "local"


class VideoClip(Base):
    """
    Video_clips table.

    clip_path holds the remote-relative key for remote clips;
    last_sync_utc is the watermark of the last applied sidecar.
    """
    __tablename__ = "video_clips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False)
    athlete_id = Column(Integer, default=0)
    section = Column(Integer, default=0)
    creation_date = Column(Integer, default=0)  # epoch seconds
    clip_path = Column(String, nullable=True)
    local_clip_path = Column(String, nullable=True)
    thumbnail_path = Column(String, nullable=True)
    local_thumbnail_path = Column(String, nullable=True)
    comparison_name = Column(String, nullable=True)
    clip_duration = Column(Float, default=0.0)
    clip_size = Column(Integer, default=0)
    source = Column(String, default=SOURCE_LOCAL)
    is_synced = Column(Boolean, default=False)
    last_sync_utc = Column(Integer, default=0)
    has_timing = Column(Boolean, default=False)

    __table_args__ = (
        Index('idx_video_clips_session', 'session_id'),
        Index('idx_video_clips_clip_path', 'clip_path'),
        {"sqlite_autoincrement": True}
    )

    @property
    def is_remote(self) -> bool:
        return (self.source or "").lower() == SOURCE_REMOTE
