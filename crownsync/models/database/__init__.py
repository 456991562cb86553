"""
CrownSync - Database Models Package

This package contains all SQLAlchemy models of the local catalog.
All models share a common declarative base.
"""

# Import Base first
from crownsync.models.database.base import Base

# Import all models
from crownsync.models.database.session import Session
from crownsync.models.database.video_clip import VideoClip, SOURCE_REMOTE, SOURCE_LOCAL
from crownsync.models.database.athlete import Athlete
from crownsync.models.database.tag import Tag, EventTagDefinition
from crownsync.models.database.event_input import EventInput
from crownsync.models.database.timing_event import TimingEvent

# Export all models and Base
__all__ = [
    'Base',
    'Session',
    'VideoClip',
    'SOURCE_REMOTE',
    'SOURCE_LOCAL',
    'Athlete',
    'Tag',
    'EventTagDefinition',
    'EventInput',
    'TimingEvent',
]
