"""
Manage (event authority) model
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class Manage(Base):
    __tablename__ = "manages"

    # Member lifecycle is independent of events, so member_id is not a foreign key
    member_id = Column(String(64), primary_key=True, index=True)
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True, index=True)
    granted_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="managers")
