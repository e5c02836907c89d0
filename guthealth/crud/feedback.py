from sqlalchemy.orm import Session
from guthealth.crud.base import CRUDBase
from guthealth.models.feedback import Feedback
from guthealth.schemas.feedback import FeedbackCreate


class CRUDFeedback(CRUDBase[Feedback, FeedbackCreate, FeedbackCreate]):
    def create_with_user(self, db: Session, *, obj_in: FeedbackCreate, user_id: int) -> Feedback:
        data = obj_in.model_dump()
        data["user_id"] = user_id
        db_obj = Feedback(**data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def list_by_user(self, db: Session, *, user_id: int, limit: int = 50) -> list[Feedback]:
        return (
            db.query(Feedback)
            .filter(Feedback.user_id == user_id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .limit(limit)
            .all()
        )


feedback = CRUDFeedback(Feedback)
