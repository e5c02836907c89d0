from .user import user
from .health_record import health_record
from .notification import notification
from .feedback import feedback

__all__ = ["user", "health_record", "notification", "feedback"]
