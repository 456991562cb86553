"""
CrownSync - TimingEvent Database Model
"""

from sqlalchemy import Column, Integer, Index

from crownsync.models.database.base import Base


class TimingEvent(Base):
    """Timing_events table - stopwatch splits recorded against a clip"""
    __tablename__ = "timing_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(Integer, nullable=False)
    session_id = Column(Integer, nullable=False)
    athlete_id = Column(Integer, default=0)
    section_id = Column(Integer, default=0)
    kind = Column(Integer, default=0)
    elapsed_ms = Column(Integer, default=0)
    split_ms = Column(Integer, default=0)
    lap_index = Column(Integer, default=0)
    run_index = Column(Integer, default=0)
    created_at = Column(Integer, default=0)

    __table_args__ = (
        Index('idx_timing_events_video', 'video_id'),
    )
