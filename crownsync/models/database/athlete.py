"""
CrownSync - Athlete Database Model
"""

from sqlalchemy import Column, Integer, String

from crownsync.models.database.base import Base


class Athlete(Base):
    """Athletes table - ids come from the shared library"""
    __tablename__ = "athletes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    first_name = Column(String, default="")
    last_name = Column(String, default="")
    category = Column(String, nullable=True)
    category_id = Column(Integer, default=0)
    favorite = Column(Integer, default=0)
