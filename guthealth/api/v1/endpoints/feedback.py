import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from guthealth import models
from guthealth.api import deps
from guthealth.crud.feedback import feedback as feedback_crud
from guthealth.schemas.feedback import Feedback, FeedbackCreate

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_LISTED = 50


@router.post("/", response_model=Feedback, status_code=201)
def create_feedback(
    *,
    db: Session = Depends(deps.get_db),
    feedback_in: FeedbackCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    obj = feedback_crud.create_with_user(db=db, obj_in=feedback_in, user_id=current_user.id)
    logger.info(f"Feedback {obj.id} submitted by user {current_user.id}")
    return obj


@router.get("/", response_model=list[Feedback])
def list_feedback(
    *,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    return feedback_crud.list_by_user(db=db, user_id=current_user.id, limit=MAX_LISTED)
