from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    Index,
    JSON,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from guthealth.db.base import Base
from guthealth.models.health_record import HealthRecord


class HealthScore(Base):
    """Score derived from a record. Rows are never updated in place: a new
    score for the same (user, date) soft-deletes the live one first."""
    __tablename__ = "health_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    record_id = Column(Integer, ForeignKey("poop_records.id"), nullable=True, index=True)
    score_date = Column(Date, nullable=False, index=True)

    total_score = Column(Integer, nullable=False)  # 0..100
    health_level = Column(String(16), nullable=False)  # excellent | good | fair | poor | bad
    poop_health_score = Column(Integer, nullable=True)
    frequency_health_score = Column(Integer, nullable=True)
    symptom_health_score = Column(Integer, nullable=True)
    health_description = Column(Text, nullable=True)
    recommendations = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    record = relationship(HealthRecord)

    __table_args__ = (
        Index("idx_health_scores_user_date", "user_id", "score_date"),
    )
