from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from guthealth.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    openid = Column(String, unique=True, index=True, nullable=True)  # third-party login subject
    nickname = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    last_record_at = Column(DateTime, nullable=True)
    record_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    health_records = relationship("HealthRecord", back_populates="user")
    notifications = relationship("Notification", back_populates="user")
