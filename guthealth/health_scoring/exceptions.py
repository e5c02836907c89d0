"""Error taxonomy for the scoring and aggregation layer.

Each error carries the HTTP status the API layer answers with; the handler
registered in ``guthealth.main`` turns them into ``{"detail": message}``.
"""

from typing import Any, Dict, Optional


class HealthScoreError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(HealthScoreError):
    """Malformed or out-of-range input, rejected before scoring."""
    status_code = 422


class NotFoundError(HealthScoreError):
    status_code = 404


class PermissionDeniedError(HealthScoreError):
    status_code = 403


class InvalidPeriodError(HealthScoreError):
    """Unsupported aggregation period string."""
    status_code = 400

    def __init__(self, period: str, allowed=()):
        message = f"Invalid statistics period: {period!r}"
        if allowed:
            message += f" (expected one of: {', '.join(allowed)})"
        super().__init__(message, {"period": period})


class RepositoryError(HealthScoreError):
    """Storage failure, propagated to the caller unchanged in meaning."""
    status_code = 500
