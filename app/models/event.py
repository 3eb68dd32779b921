"""
Event model
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base

class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, index=True)
    type = Column(String(100), nullable=False)
    date_time = Column(DateTime, nullable=False, index=True)
    location = Column(String(255), nullable=False)
    host = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    managers = relationship("Manage", back_populates="event", cascade="all, delete-orphan")
