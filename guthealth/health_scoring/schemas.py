from datetime import date
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field


class ScoreDetails(BaseModel):
    poop_health_score: Optional[int] = None
    frequency_health_score: Optional[int] = None
    symptom_health_score: Optional[int] = None


class DailyScore(BaseModel):
    id: int
    total_score: int
    health_level: str
    level_name: Optional[str] = None
    score_date: date
    details: ScoreDetails
    health_description: Optional[str] = None
    recommendations: List[str] = []
    related_records: List[Dict[str, Any]] = []


class DailyScoreResponse(BaseModel):
    """``exists`` distinguishes "no score that day" from a failed lookup."""
    exists: bool
    message: Optional[str] = None
    data: Optional[DailyScore] = None


class HistoryItem(BaseModel):
    id: int
    date: date
    total_score: int
    health_level: str
    details: ScoreDetails


class HistoryPage(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    data: List[HistoryItem]


class RecentStats(BaseModel):
    average_score: float
    days_analyzed: int
    current_level: Optional[str]
    trend: str


class AdviceResponse(BaseModel):
    has_recent_data: bool
    recent_stats: Optional[RecentStats] = None
    personalized_advice: List[str] = []
    general_advice: List[str]


class RecalculateRequest(BaseModel):
    day: date = Field(..., alias="date", description="Day whose score is rebuilt from its latest record")


class ReminderCheck(BaseModel):
    created: bool
    notification_id: Optional[int] = None
    health_data: Dict[str, Any]
