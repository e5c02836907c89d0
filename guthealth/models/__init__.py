from .user import User
from .health_record import HealthRecord
from .notification import Notification
from .feedback import Feedback

__all__ = ["User", "HealthRecord", "Notification", "Feedback"]
