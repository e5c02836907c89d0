"""Score -> health level policy.

Cut points are configuration (``settings.HEALTH_LEVEL_THRESHOLDS``); the
display wording lives in its own tables so copy changes never touch scoring.
"""

from typing import Mapping, Optional

from guthealth.core.config import settings

LEVELS = ("excellent", "good", "fair", "poor", "bad")

LEVEL_NAMES = {
    "excellent": "Excellent",
    "good": "Good",
    "fair": "Fair",
    "poor": "Poor",
    "bad": "Bad",
}

LEVEL_DESCRIPTIONS = {
    "excellent": "Very healthy. Keep up your good habits.",
    "good": "In good shape. Keep an eye on your daily routine.",
    "fair": "Average. Consider adjusting your diet and lifestyle.",
    "poor": "Below par. Pay attention and work on improving it.",
    "bad": "Not healthy. Please consider seeing a doctor.",
}


class HealthLevelPolicy:
    def __init__(self, thresholds: Optional[Mapping[str, int]] = None):
        thresholds = dict(settings.HEALTH_LEVEL_THRESHOLDS if thresholds is None else thresholds)
        # (level, minimum score), highest bucket first; "bad" is the floor
        self._cuts = [(level, thresholds[level]) for level in LEVELS[:-1] if level in thresholds]
        previous = None
        for level, cut in self._cuts:
            if previous is not None and cut > previous:
                raise ValueError(f"Threshold for {level} ({cut}) is above the previous level ({previous})")
            previous = cut

    def level_for(self, score: float) -> str:
        for level, cut in self._cuts:
            if score >= cut:
                return level
        return "bad"

    @staticmethod
    def level_name(level: Optional[str]) -> Optional[str]:
        return LEVEL_NAMES.get(level, level)

    @staticmethod
    def level_description(level: Optional[str]) -> str:
        return LEVEL_DESCRIPTIONS.get(level, "Unknown level")


def default_policy() -> HealthLevelPolicy:
    return HealthLevelPolicy(settings.HEALTH_LEVEL_THRESHOLDS)
