from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, date
from enum import Enum


# Enums
class StoolShape(str, Enum):
    """Bristol stool scale type"""
    TYPE_1 = "type_1"
    TYPE_2 = "type_2"
    TYPE_3 = "type_3"
    TYPE_4 = "type_4"
    TYPE_5 = "type_5"
    TYPE_6 = "type_6"
    TYPE_7 = "type_7"

class StoolColor(str, Enum):
    YELLOW = "yellow"
    BROWN = "brown"
    DARK_BROWN = "dark_brown"
    GREEN = "green"
    BLACK = "black"
    RED = "red"
    WHITE = "white"
    OTHER = "other"

class BowelFeeling(str, Enum):
    """How the movement felt"""
    SMOOTH = "smooth"
    NORMAL = "normal"
    DIFFICULT = "difficult"
    PAINFUL = "painful"

class OdorIntensity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very_strong"

class Hardness(str, Enum):
    VERY_SOFT = "very_soft"
    SOFT = "soft"
    NORMAL = "normal"
    HARD = "hard"
    VERY_HARD = "very_hard"

class StatisticsPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


FEELING_ORDER = [f.value for f in BowelFeeling]

# Alternate client field names -> stored field names
FIELD_ALIASES = {
    "time": "record_time",
    "note": "notes",
    "otherSymptom": "other_symptom",
    "hasBlood": "has_blood",
    "hasPus": "has_pus",
    "hasMucus": "has_mucus",
}


def _normalize_payload(data: Any) -> Any:
    """Accept the index-based encodings older clients send.

    ``shape`` may be 1..7, ``type_index``/``typeIndex`` 0..6 and
    ``feeling``/``mood_index``/``moodIndex`` an index into ``FEELING_ORDER``.
    Out-of-range integers are left as-is so enum validation rejects them.
    """
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for alias, name in FIELD_ALIASES.items():
        if alias in data and name not in data:
            data[name] = data.pop(alias)

    for key in ("type_index", "typeIndex"):
        index = data.pop(key, None)
        if isinstance(index, int) and "shape" not in data:
            data["shape"] = index + 1
    shape = data.get("shape")
    if isinstance(shape, int) and not isinstance(shape, bool) and 1 <= shape <= 7:
        data["shape"] = f"type_{shape}"

    for key in ("mood_index", "moodIndex"):
        index = data.pop(key, None)
        if isinstance(index, int) and "feeling" not in data:
            data["feeling"] = index
    feeling = data.get("feeling")
    if isinstance(feeling, int) and not isinstance(feeling, bool) and 0 <= feeling < len(FEELING_ORDER):
        data["feeling"] = FEELING_ORDER[feeling]
    return data


# Base schemas
class HealthRecordBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    record_time: Optional[datetime] = Field(None, description="When the movement happened; defaults to now")
    shape: StoolShape = Field(StoolShape.TYPE_4, description="Bristol type")
    color: StoolColor = StoolColor.BROWN
    feeling: BowelFeeling = BowelFeeling.NORMAL
    frequency: int = Field(1, ge=0, le=20, description="Movements covered by this record")
    has_blood: bool = False
    has_pus: bool = False
    has_mucus: bool = False
    odor_intensity: Optional[OdorIntensity] = OdorIntensity.MODERATE
    hardness: Optional[Hardness] = None
    duration: Optional[str] = Field(None, max_length=32, description="Free-form duration, e.g. '5-10 min'")
    symptoms: List[str] = Field(default_factory=list)
    other_symptom: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    habits: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_indexes(cls, data: Any) -> Any:
        return _normalize_payload(data)


class HealthRecordCreate(HealthRecordBase):
    pass


class HealthRecordUpdate(BaseModel):
    """All fields optional; only the fields sent are changed."""
    model_config = ConfigDict(use_enum_values=True)

    record_time: Optional[datetime] = None
    shape: Optional[StoolShape] = None
    color: Optional[StoolColor] = None
    feeling: Optional[BowelFeeling] = None
    frequency: Optional[int] = Field(None, ge=0, le=20)
    has_blood: Optional[bool] = None
    has_pus: Optional[bool] = None
    has_mucus: Optional[bool] = None
    odor_intensity: Optional[OdorIntensity] = None
    hardness: Optional[Hardness] = None
    duration: Optional[str] = Field(None, max_length=32)
    symptoms: Optional[List[str]] = None
    other_symptom: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    habits: Optional[List[str]] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_indexes(cls, data: Any) -> Any:
        return _normalize_payload(data)


class HealthRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    record_time: datetime
    record_date: date
    shape: str
    color: str
    feeling: str
    frequency: int
    has_blood: bool
    has_pus: bool
    has_mucus: bool
    odor_intensity: Optional[str] = None
    hardness: Optional[str] = None
    duration: Optional[str] = None
    symptoms: List[str] = []
    other_symptom: Optional[str] = None
    notes: Optional[str] = None
    habits: List[str] = []
    created_at: datetime
    updated_at: datetime


class RecordScore(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    total_score: int
    health_level: str
    score_date: date
    recommendations: List[str] = []


class HealthRecordWithScore(HealthRecord):
    health_score: Optional[RecordScore] = None


class HealthRecordPage(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool
    data: List[HealthRecord]


class HealthRecordStatistics(BaseModel):
    period: StatisticsPeriod
    start_date: date
    end_date: date
    total_records: int
    shape_distribution: Dict[str, int]
    color_distribution: Dict[str, int]
    feeling_distribution: Dict[str, int]
    symptoms_count: Dict[str, int]
    blood_count: int
    pus_count: int
