import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from .levels import HealthLevelPolicy, default_policy

# Bristol stool scale, type_3..type_5 being normal
SHAPE_SCORES: Mapping[str, int] = MappingProxyType({
    "type_1": 40,  # separate hard lumps, severe constipation
    "type_2": 60,
    "type_3": 90,
    "type_4": 100,
    "type_5": 90,
    "type_6": 60,
    "type_7": 40,  # watery, severe diarrhoea
})

COLOR_SCORES: Mapping[str, int] = MappingProxyType({
    "yellow": 70,
    "brown": 100,
    "dark_brown": 90,
    "green": 70,
    "black": 50,
    "red": 30,
    "white": 40,
    "other": 60,
})

FEELING_SCORES: Mapping[str, int] = MappingProxyType({
    "smooth": 100,
    "normal": 90,
    "difficult": 60,
    "painful": 30,
})

SHAPE_WEIGHT = 0.4
COLOR_WEIGHT = 0.3
FEELING_WEIGHT = 0.2
BLOOD_WEIGHT = 0.1

PUS_PENALTY = 20
FREQUENCY_CEILING = 3
FREQUENCY_STEP_PENALTY = 5
UNDER_FREQUENCY_PENALTY = 10

# Ordered: a record's recommendations follow this table's order
RECORD_RECOMMENDATIONS = (
    ("blood", "Blood was observed in the stool. Please consult a doctor promptly."),
    ("pus", "Pus was observed in the stool, which may indicate inflammation. Seek medical advice."),
    ("hard", "Stool is hard: drink more water and add fibre from vegetables, fruit and whole grains."),
    ("loose", "Stool is loose: avoid raw, cold, greasy or spicy food and stay hydrated."),
    ("color", "Unusual stool color. Keep observing, and see a doctor if it persists."),
    ("strain", "Bowel movements are difficult or painful: avoid straining and keep a regular routine."),
    ("frequent", "Bowel movements are unusually frequent. Watch your diet and hydration."),
    ("infrequent", "No bowel movement recorded for the period. Regular exercise helps gut motility."),
)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    level: str
    poop_health_score: int
    frequency_health_score: int
    symptom_health_score: int
    recommendations: List[str] = field(default_factory=list)


def field_value(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present attribute/key from a mapping, ORM row or model."""
    for name in names:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default


def round_half_up(value: float, ndigits: int = 0):
    """Round like ``Math.round`` (ties go up) instead of Python's banker's rounding."""
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if ndigits == 0 else rounded


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def frequency_penalty(frequency: Optional[int]) -> int:
    if frequency is None:
        return 0
    if frequency > FREQUENCY_CEILING:
        return (frequency - FREQUENCY_CEILING) * FREQUENCY_STEP_PENALTY
    if frequency < 1:
        return UNDER_FREQUENCY_PENALTY
    return 0


def _recommendations_for(shape: str, color: str, feeling: str, frequency: Optional[int],
                         has_blood: bool, has_pus: bool) -> List[str]:
    triggered = set()
    if has_blood:
        triggered.add("blood")
    if has_pus:
        triggered.add("pus")
    if shape in ("type_1", "type_2"):
        triggered.add("hard")
    elif shape in ("type_6", "type_7"):
        triggered.add("loose")
    if color in ("black", "red", "white"):
        triggered.add("color")
    if feeling in ("difficult", "painful"):
        triggered.add("strain")
    if frequency is not None and frequency > FREQUENCY_CEILING:
        triggered.add("frequent")
    elif frequency is not None and frequency < 1:
        triggered.add("infrequent")
    return [text for key, text in RECORD_RECOMMENDATIONS if key in triggered]


def calculate_score(record: Any, policy: Optional[HealthLevelPolicy] = None) -> ScoreResult:
    """Score a single stool record on a 0..100 scale.

    Weighted blend of shape/color/feeling/blood, clamped to [0, 100], then the
    pus and frequency penalties, then a second clamp and half-up rounding.
    Unknown category values contribute 0 rather than raising.
    """
    policy = policy or default_policy()

    shape = field_value(record, "shape")
    color = field_value(record, "color")
    feeling = field_value(record, "feeling")
    frequency = field_value(record, "frequency")
    has_blood = bool(field_value(record, "has_blood", default=False))
    has_pus = bool(field_value(record, "has_pus", default=False))

    shape_score = SHAPE_SCORES.get(shape, 0)
    color_score = COLOR_SCORES.get(color, 0)
    feeling_score = FEELING_SCORES.get(feeling, 0)
    blood_score = 0 if has_blood else 100

    score = clamp(
        shape_score * SHAPE_WEIGHT
        + color_score * COLOR_WEIGHT
        + feeling_score * FEELING_WEIGHT
        + blood_score * BLOOD_WEIGHT
    )
    if has_pus:
        score -= PUS_PENALTY
    penalty = frequency_penalty(frequency)
    score -= penalty

    total = round_half_up(clamp(score))

    appearance = (shape_score * SHAPE_WEIGHT + color_score * COLOR_WEIGHT + feeling_score * FEELING_WEIGHT) / (
        SHAPE_WEIGHT + COLOR_WEIGHT + FEELING_WEIGHT
    )
    symptom = 100 - (50 if has_blood else 0) - (30 if has_pus else 0)

    return ScoreResult(
        score=total,
        level=policy.level_for(total),
        poop_health_score=round_half_up(clamp(appearance)),
        frequency_health_score=round_half_up(clamp(100 - penalty)),
        symptom_health_score=round_half_up(clamp(symptom)),
        recommendations=_recommendations_for(shape, color, feeling, frequency, has_blood, has_pus),
    )
