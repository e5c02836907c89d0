from fastapi import APIRouter

from guthealth.api.v1.endpoints import health_records
from guthealth.api.v1.endpoints import statistics
from guthealth.api.v1.endpoints import notifications
from guthealth.api.v1.endpoints import feedback
from guthealth.health_scoring import api as health_scores

api_router = APIRouter()

api_router.include_router(health_records.router, prefix="/health-records", tags=["health-records"])
api_router.include_router(health_scores.router, prefix="/health-scores", tags=["health-scores"])
api_router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["feedback"])
