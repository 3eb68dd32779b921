"""
Member model
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base

class Member(Base):
    __tablename__ = "members"

    member_id = Column(String(64), primary_key=True, index=True)  # e.g. "K" + kakao user id
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sessions = relationship("LoginSession", back_populates="member", cascade="all, delete-orphan")
