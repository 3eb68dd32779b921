"""
Login session model
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.db import Base

class LoginSession(Base):
    __tablename__ = "login_sessions"

    token = Column(String(128), primary_key=True, index=True)
    member_id = Column(String(64), ForeignKey("members.member_id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    member = relationship("Member", back_populates="sessions")
