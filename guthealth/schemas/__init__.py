from .health_record import (
    HealthRecord,
    HealthRecordCreate,
    HealthRecordUpdate,
    HealthRecordWithScore,
    HealthRecordPage,
    HealthRecordStatistics,
)
from .notification import NotificationSettings, NotificationCreate, NotificationOut, NotificationPage
from .feedback import Feedback, FeedbackCreate
from .token import TokenPayload
