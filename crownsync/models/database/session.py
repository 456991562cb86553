"""
CrownSync - Session Database Model

A training session in the local catalog.
"""

from sqlalchemy import Column, Integer, String

from crownsync.models.database.base import Base


class Session(Base):
    """
    Sessions table.

    Sessions imported from the remote store keep the remote session id
    as their primary key so ids stay aligned across devices.
    """
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=True)
    place = Column(String, nullable=True)
    coach = Column(String, nullable=True)
    session_type = Column(String, nullable=True)
    date_utc = Column(Integer, default=0)  # epoch seconds
    participants = Column(String, default="")

    @property
    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        return f"Sesión {self.id}"
