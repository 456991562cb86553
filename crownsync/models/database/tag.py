"""
CrownSync - Tag and Event Tag Definition Database Models
"""

from sqlalchemy import Column, Integer, String

from crownsync.models.database.base import Base


class Tag(Base):
    """Tags table - plain tags assigned to clips"""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=True)


class EventTagDefinition(Base):
    """Event_tag_definitions table - event types whose occurrences are counted"""
    __tablename__ = "event_tag_definitions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
