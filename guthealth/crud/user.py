from typing import Optional

from sqlalchemy.orm import Session

from guthealth.models.user import User


class CRUDUser:
    def get(self, db: Session, id: int) -> Optional[User]:
        return db.query(User).filter(User.id == id).first()

    def touch_record_stats(self, db: Session, *, user: User, record_time, delta: int) -> User:
        """Keep the denormalised ``record_count``/``last_record_at`` in step with records."""
        user.record_count = max(0, (user.record_count or 0) + delta)
        if record_time is not None and (user.last_record_at is None or record_time > user.last_record_at):
            user.last_record_at = record_time
        db.add(user)
        db.commit()
        db.refresh(user)
        return user


user = CRUDUser()
