"""
CrownSync - Database Base

Shared declarative base for all local catalog models.
"""

from sqlalchemy.orm import declarative_base

# Create the shared declarative base
Base = declarative_base()
