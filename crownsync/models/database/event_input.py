"""
CrownSync - EventInput Database Model

One input row against a clip: an event occurrence (is_event=1) or a tag
assignment (is_event=0).
"""

from sqlalchemy import Column, Integer, String, Index

from crownsync.models.database.base import Base


class EventInput(Base):
    """Event_inputs table"""
    __tablename__ = "event_inputs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, nullable=False)
    video_id = Column(Integer, nullable=False)
    athlete_id = Column(Integer, default=0)
    category_id = Column(Integer, default=0)
    input_type_id = Column(Integer, nullable=False)
    input_date_time = Column(Integer, default=0)
    input_value = Column(String, nullable=True)
    timestamp_ms = Column(Integer, default=0)
    is_event = Column(Integer, default=0)

    __table_args__ = (
        Index('idx_event_inputs_video', 'video_id'),
    )
