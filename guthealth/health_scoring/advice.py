from typing import Any, Dict, List, Optional, Sequence

from .engine import field_value
from .trends import average_score, classify_trend, mean

GENERAL_ADVICE = (
    "Keep regular meal times and eat consistent portions.",
    "Eat more dietary fibre: vegetables, fruit and whole grains.",
    "Drink enough water every day, around 2000 ml.",
    "Moderate exercise helps gut motility and digestion.",
    "Keep a regular sleep schedule and avoid staying up late.",
    "Manage stress and keep a positive mood.",
    "If discomfort persists, see a doctor promptly.",
)

MAINTAIN_ADVICE = (
    "Your gut health is in very good shape. Keep up your healthy lifestyle.",
    "Keep recording regularly so any change is noticed early.",
)

IMPROVE_ADVICE = (
    "Your gut health is good and can improve further with a better-balanced diet.",
    "Eat more dietary fibre and stay well hydrated.",
)

ATTENTION_ADVICE = (
    "Your gut health needs attention. Consider adjusting your eating habits.",
    "Cut down on spicy and greasy food and keep regular hours.",
    "If symptoms persist, consult a doctor.",
)

TREND_REMARKS = {
    "improving": "Good to see your gut health improving. Keep it up!",
    "declining": "Your gut health has been slipping. Pay attention to your diet and daily habits.",
}


def personalized_advice(avg: float, trend: str) -> List[str]:
    if avg >= 80:
        advice = list(MAINTAIN_ADVICE)
    elif avg >= 60:
        advice = list(IMPROVE_ADVICE)
    else:
        advice = list(ATTENTION_ADVICE)
    remark = TREND_REMARKS.get(trend)
    if remark:
        advice.append(remark)
    return advice


def _collect_recommendations(rows: Sequence[Any]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in rows:
        for rec in field_value(row, "recommendations", default=None) or []:
            seen.setdefault(rec, None)
    return list(seen)


def generate_advice(recent: Sequence[Any], trend: Optional[str] = None) -> Dict[str, Any]:
    """Advice for a user from their recent score rows, oldest first.

    Historical per-record recommendations come first (first-seen order),
    then the bundle for the average tier and the trend remark.
    """
    if not recent:
        return {"has_recent_data": False, "general_advice": list(GENERAL_ADVICE)}

    scores = [field_value(row, "total_score", default=0) or 0 for row in recent]
    trend = trend or classify_trend(scores)
    avg = mean(scores)

    return {
        "has_recent_data": True,
        "recent_stats": {
            "average_score": average_score(scores),
            "days_analyzed": len(recent),
            "current_level": field_value(recent[0], "health_level"),
            "trend": trend,
        },
        "personalized_advice": _collect_recommendations(recent) + personalized_advice(avg, trend),
        "general_advice": list(GENERAL_ADVICE),
    }
