from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from guthealth.db.base import Base


class HealthRecord(Base):
    """A single logged bowel movement (or a batch of them, see ``frequency``)."""
    __tablename__ = "poop_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    record_time = Column(DateTime, nullable=False)
    record_date = Column(Date, nullable=False, index=True)  # local calendar date the score is filed under

    shape = Column(String(16), nullable=False, default="type_4")  # type_1..type_7 (Bristol scale)
    color = Column(String(16), nullable=False, default="brown")
    feeling = Column(String(16), nullable=False, default="normal")
    frequency = Column(Integer, nullable=False, default=1)
    has_blood = Column(Boolean, nullable=False, default=False)
    has_pus = Column(Boolean, nullable=False, default=False)
    has_mucus = Column(Boolean, nullable=False, default=False)
    odor_intensity = Column(String(16), nullable=True, default="moderate")
    hardness = Column(String(16), nullable=True)
    duration = Column(String(32), nullable=True)

    symptoms = Column(JSON, nullable=False, default=list)
    other_symptom = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    habits = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="health_records")

    __table_args__ = (
        Index("idx_poop_records_user_date", "user_id", "record_date"),
    )
