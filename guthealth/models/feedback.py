from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from guthealth.db.base import Base


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    category = Column(String(32), nullable=True)
    contact = Column(String(100), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    status = Column(String(16), nullable=False, default="open")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
