from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class FeedbackCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    category: Optional[str] = Field(None, max_length=32)
    contact: Optional[str] = Field(None, max_length=100)
    images: List[str] = Field(default_factory=list, max_length=9)


class Feedback(BaseModel):
    id: int
    user_id: int
    content: str
    category: Optional[str]
    contact: Optional[str]
    images: List[str] = []
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
